from clipbridge.main import main

main()
