from replacer.cli.main import main


main()
