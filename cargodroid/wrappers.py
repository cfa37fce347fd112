import os
import shutil
from .cli_logger import logger

RESOURCES_DIR = os.path.join(os.path.dirname(__file__), "resources")

# resource name -> location relative to the build root
WRAPPER_SCRIPTS = {
    "linker-wrapper.sh": os.path.join("linker-wrapper", "linker-wrapper.sh"),
    "linker-wrapper.bat": os.path.join("linker-wrapper", "linker-wrapper.bat"),
    "linker-wrapper.py": os.path.join("linker-wrapper", "linker-wrapper.py"),
    "run-on-android.sh": os.path.join("runner", "run-on-android.sh"),
    "run-on-android.bat": os.path.join("runner", "run-on-android.bat"),
}


def _same_content(a, b):
    if not os.path.exists(b):
        return False
    with open(a, "rb") as fa, open(b, "rb") as fb:
        return fa.read() == fb.read()


def install_wrapper_scripts(build_root):
    """Copy the linker wrapper and runner scripts under `build_root`. Returns the installed paths."""
    installed = []
    for resource, relative in WRAPPER_SCRIPTS.items():
        source = os.path.join(RESOURCES_DIR, resource)
        target = os.path.join(build_root, relative)
        if not _same_content(source, target):
            os.makedirs(os.path.dirname(target), exist_ok=True)
            shutil.copyfile(source, target)
            logger.debug(f"Installed {resource} to {target}")
        if target.endswith(".sh"):
            os.chmod(target, 0o755)
        installed.append(target)
    return installed
