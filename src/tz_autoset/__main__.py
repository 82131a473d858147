from tz_autoset.main import main

main()
