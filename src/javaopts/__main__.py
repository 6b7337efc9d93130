from javaopts.cli import main

raise SystemExit(main())
