from acisample.cli import main

raise SystemExit(main())
