"""CLI constants and configuration."""

from prompt_toolkit.styles import Style

COMMANDS = ["register", "login", "logout", "whoami", "upload", "list", "download", "delete", "clear", "exit", "help"]

STYLE = Style.from_dict(
    {
        "prompt": "#2E9CCA bold",
        "command": "#0088ff bold",
    }
)

SKY_BLUE = "\033[38;2;46;156;202m"
GREEN = "\033[38;2;76;175;80m"
RESET = "\033[0m"

LOGO = f"""{SKY_BLUE}
 ███████╗██╗██╗     ███████╗███████╗██╗   ██╗███╗   ██╗ ██████╗
 ██╔════╝██║██║     ██╔════╝██╔════╝╚██╗ ██╔╝████╗  ██║██╔════╝
 █████╗  ██║██║     █████╗  ███████╗ ╚████╔╝ ██╔██╗ ██║██║
 ██╔══╝  ██║██║     ██╔══╝  ╚════██║  ╚██╔╝  ██║╚██╗██║██║
 ██║     ██║███████╗███████╗███████║   ██║   ██║ ╚████║╚██████╗
 ╚═╝     ╚═╝╚══════╝╚══════╝╚══════╝   ╚═╝   ╚═╝  ╚═══╝ ╚═════╝
{RESET}"""

WELCOME_TITLE = "FileSync CLI - Shared file storage"
WELCOME_HELP = "Type 'help' for commands or 'exit' to quit.\n"

PROMPT_TEXT = "filesync> "

CONFIG_DIR_NAME = ".filesync"
DEFAULT_DOWNLOAD_DIR = "downloads"

HELP_TEXT = """Available commands:
  register <username> <password>      Register a new user account and log in
  login <username> <password>         Log in as an existing user
  logout                              Forget the logged-in user
  whoami                              Show the logged-in user
  upload <path> [<path> ...]          Upload one or more local files
  list                                List all files, newest first
  download <file_id> [output_path]    Download a file (defaults to downloads/<original name>)
  delete <file_id>                    Delete a file you uploaded
  clear                               Clear screen and redisplay welcome message
  help                                Show this help
  exit                                Exit REPL

Examples:
  register alice mypassword123
  login alice mypassword123
  upload report.pdf "notes/meeting minutes.txt"
  list
  download 3
  download 3 ~/Desktop/
  delete 3"""
