from chored.cli.main import main

main()
