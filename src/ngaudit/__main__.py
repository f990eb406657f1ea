from ngaudit.cli import main

main()
