from urlprobe.cli import main

raise SystemExit(main())
