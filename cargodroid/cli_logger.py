import datetime
import sys
import traceback
import os
from colorama import Fore, Style, init

# Initialize Colorama
init(autoreset=True)

LOG_DIR = os.path.join(os.path.expanduser("~"), ".cargodroid", "logs")
os.makedirs(LOG_DIR, exist_ok=True)

# Console thresholds. Everything still lands in the log file.
DEBUG = 10
INFO = 20
LIFECYCLE = 25
WARNING = 30
ERROR = 40

LEVEL_NAMES = {
    "debug": DEBUG,
    "info": INFO,
    "lifecycle": LIFECYCLE,
    "warning": WARNING,
    "error": ERROR,
}


class Logger:
    def __init__(self, level=LIFECYCLE):
        self.level = level
        self.log_file = os.path.join(
            LOG_DIR,
            f"cargodroid_{datetime.datetime.now().strftime('%Y%m%d_%H%M%S')}.log"
        )

    def set_level(self, level):
        if isinstance(level, str):
            level = LEVEL_NAMES[level.lower()]
        self.level = level

    def is_enabled(self, level):
        """Return True if messages at `level` reach the console."""
        return level >= self.level

    def _get_timestamp(self):
        return datetime.datetime.now().strftime("%H:%M:%S")

    def _log(self, level, message, color, stream=sys.stdout, prefix="", show_timestamp=True, threshold=LIFECYCLE):
        if show_timestamp:
            timestamp = self._get_timestamp()
            log_message = f"[{timestamp}] [{level}] {prefix}{message}\n"
            if self.is_enabled(threshold):
                print(f"{color}{Style.BRIGHT}[{timestamp}]{Style.RESET_ALL} {prefix}{message}{Style.RESET_ALL}", file=stream)
        else:
            log_message = f"[{level}] {prefix}{message}\n"
            if self.is_enabled(threshold):
                print(f"{color}{prefix}{message}{Style.RESET_ALL}", file=stream)

        with open(self.log_file, "a") as f:
            f.write(log_message)

    def info(self, message):
        self._log("INFO", message, Fore.CYAN, threshold=INFO)

    def lifecycle(self, message):
        self._log("LIFECYCLE", message, Fore.CYAN)

    def process_output(self, message):
        """Echo a line of child process output. Shown at every console level."""
        self._log("OUTPUT", message, Fore.RESET, stream=sys.stdout, show_timestamp=False, threshold=ERROR)

    def success(self, message):
        self._log("SUCCESS", message, Fore.GREEN, prefix=f"{Style.BRIGHT}✓ {Style.RESET_ALL}{Fore.GREEN}")

    def warning(self, message):
        self._log("WARNING", message, Fore.YELLOW, stream=sys.stderr,
                  prefix=f"{Style.BRIGHT}⚠ {Style.RESET_ALL}{Fore.YELLOW}", threshold=WARNING)

    def error(self, message):
        self._log("ERROR", message, Fore.RED, stream=sys.stderr,
                  prefix=f"{Style.BRIGHT}✖ {Style.RESET_ALL}{Fore.RED}", threshold=ERROR)

    def debug(self, message):
        self._log("DEBUG", message, Fore.WHITE + Style.DIM, threshold=DEBUG)

    # -------- Exception logging --------
    def exception(self, exc_type, exc_value, exc_traceback):
        self.error(f"An unhandled exception occurred: {exc_value}")
        formatted_lines = traceback.format_exception(exc_type, exc_value, exc_traceback)
        for line in formatted_lines:
            for sub_line in line.splitlines():
                if sub_line.strip():
                    self._log("TRACEBACK", f">> {sub_line}", Fore.RED, stream=sys.stderr, threshold=DEBUG)


# ---------------- Helper ----------------
logger = Logger()

def get_latest_log_file():
    """Return the path to the latest log file."""
    log_files = [os.path.join(LOG_DIR, f) for f in os.listdir(LOG_DIR) if f.endswith(".log")]
    if not log_files:
        return None
    return max(log_files, key=os.path.getctime)
