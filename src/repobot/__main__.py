from repobot import main

main()
