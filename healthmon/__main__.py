from healthmon.main import main

main()
