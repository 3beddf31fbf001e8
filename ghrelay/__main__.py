from ghrelay.app import main

main()
