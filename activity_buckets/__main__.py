from activity_buckets.pipeline import main

raise SystemExit(main())
