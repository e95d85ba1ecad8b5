import sys
from pathlib import Path

from boar.boar_runtime import ScriptRunner
from boar.boar_printer import Printer

PROMPT = "~> "
TERMINATOR = "exit()"


def read_line(prompt: str) -> str:
    """A basic line prompt. Returns '' at end of input."""
    sys.stdout.write(prompt)
    sys.stdout.flush()
    return sys.stdin.readline()


def run_script_file(file_path: str):
    """Run a Boar script file non-interactively and exit with appropriate status."""
    runner = ScriptRunner()
    printer = Printer()
    p = Path(file_path)
    try:
        source = p.read_text(encoding="utf-8")
    except FileNotFoundError:
        print(f"Error: file not found: {file_path}", file=sys.stderr)
        raise SystemExit(1)
    result = runner.handle_script(source)
    if result.status == 'error':
        print(result.format_error(), file=sys.stderr)
        raise SystemExit(1)
    if result.value is not None:
        print(printer.pformat(result.value))


def main():
    """Run a script file when provided, otherwise start the interactive REPL."""
    if len(sys.argv) > 1:
        run_script_file(sys.argv[1])
        return

    print("Boar REPL")
    print(f"Type '{TERMINATOR}' or press Ctrl+D to quit.")

    runner = ScriptRunner()
    printer = Printer()

    while True:
        raw = read_line(PROMPT)
        if raw == "":
            print("\nExiting.")
            break
        line = raw.strip()
        if not line:
            continue
        if line == TERMINATOR:
            break

        result = runner.handle_script(line)
        if result.status == 'error':
            print(result.format_error(), file=sys.stderr)
            continue
        # Statements such as `let` produce no value and print nothing.
        if result.value is not None:
            print(printer.pformat(result.value))


if __name__ == "__main__":
    try:
        main()
    except KeyboardInterrupt:
        print("\nExiting.")
