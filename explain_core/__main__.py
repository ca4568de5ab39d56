from explain_core.gui.app import main

main()
