from pagebrief.cli import main

main()
