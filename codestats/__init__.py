"""External coding-profile aggregation engine.

Fetches a user's problem-solving stats from third-party platforms, merges
them into one aggregated profile per user, and derives streaks and
achievements from the local submission history.

Key modules:
    base            -- BaseAdapter abstract class (never-raising fetch pipeline)
    adapters        -- LeetCode, Codeforces, CodeChef, AtCoder, GeeksforGeeks, HackerRank
    extractor       -- PatternExtractor and Rule tables for scraped pages
    factory         -- AdapterFactory and the fixed platform order
    controller      -- ThreadPoolController for concurrent fetches
    sync            -- ProfileSyncService: sync, stats and achievements
    streaks         -- streak computation and the achievement catalog
    metrics         -- MetricsCollector for fetch outcomes
    models          -- FetchResult, AggregatedProfile and friends
    rate_limiter    -- per-platform RateLimiter
    backoff         -- BackoffStrategy for transient-error retries
    storage         -- DocumentStore backends (in-memory, JSON files)
    errors          -- UserNotFound, StorageFailure, SourceUnavailable, SyncAborted
    config          -- SyncSettings
    logging_config  -- configure_logging
"""
