"""Main CLI entry point"""

from replacer.cli.replace import replace_command


cli = replace_command


def main():
    """Entry point for the CLI"""
    cli()


if __name__ == '__main__':
    main()
