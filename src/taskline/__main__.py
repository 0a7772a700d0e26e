from taskline.cli import main

main()
