from dummy.app import main

main()
