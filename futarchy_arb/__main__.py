from futarchy_arb.main import main

main()
