from exif_recompress.app import main

raise SystemExit(main())
