from grocer.cli import main

main()
