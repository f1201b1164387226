from thermoviz.cli.main import main

main()
