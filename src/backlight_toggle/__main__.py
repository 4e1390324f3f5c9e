from backlight_toggle.cli import main

raise SystemExit(main())
