from .demos import main

raise SystemExit(main())
