import os
import subprocess
import sys

args = [
    os.environ["CARGODROID_CC"],
    os.environ["CARGODROID_CC_LINK_ARG"],
]

# NDK r23+ has no libgcc, the unwinder lives in libunwind instead.
args.extend(arg for arg in sys.argv[1:] if arg != "-lgcc")

sys.exit(subprocess.call(args))
