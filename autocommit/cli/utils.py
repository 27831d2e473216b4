"""CLI Utility Functions"""

from autocommit.output import BULLET, CHECK, WARN, bold, dim, print_box, success, warning


def confirm(question: str, default: bool = True) -> bool:
    """Ask a yes/no question. Ctrl-C or end of input counts as no."""
    hint = '[Y/n]' if default else '[y/N]'
    while True:
        try:
            answer = input(f"{bold(question)} {dim(hint)} ").strip().lower()
        except (KeyboardInterrupt, EOFError):
            print()
            return False
        if not answer:
            return default
        if answer in ('y', 'yes'):
            return True
        if answer in ('n', 'no'):
            return False
        print(dim("  Please answer y or n"))


def display_file_list(title: str, files: list[str], staged: bool) -> None:
    """Show a titled list of paths, green check for staged, yellow warning otherwise."""
    if not files:
        return
    symbol = success(CHECK) if staged else warning(WARN)
    heading = success(title) if staged else warning(title)
    print(f"{symbol} {heading}")
    for path in files:
        print(dim(f"  {path}"))


def display_summary(lines: list[str]) -> None:
    """Print the step log as a bulleted box."""
    if not lines:
        return
    print()
    print_box('\n'.join(f"{BULLET} {line}" for line in lines))


def mask_secret(value: str | None) -> str:
    return "********" if value else "Not set"
