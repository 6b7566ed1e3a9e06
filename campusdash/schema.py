# campusdash/schema.py

SCHEMA_VERSION = 2

TABLES = (
    "transactions",
    "subscriptions",
    "performance_courses",
    "performance_semesters",
    "assignments",
    "schedule_items",
    "meta",
)

CREATE_TABLES_SQL = [
    """
    CREATE TABLE IF NOT EXISTS meta (
        key TEXT PRIMARY KEY,
        value TEXT
    );
    """,
    """
    CREATE TABLE IF NOT EXISTS transactions (
        id TEXT PRIMARY KEY,
        title TEXT,
        category TEXT,
        amount REAL NOT NULL DEFAULT 0,   -- magnitude; direction comes from type
        currency TEXT NOT NULL DEFAULT 'IDR',
        date TEXT,                        -- ISO instant
        type TEXT,                        -- 'income' or 'expense'
        created_at TEXT NOT NULL,
        updated_at TEXT NOT NULL
    );
    """,
    """
    CREATE INDEX IF NOT EXISTS idx_transactions_date
    ON transactions(date);
    """,
    """
    CREATE TABLE IF NOT EXISTS subscriptions (
        id TEXT PRIMARY KEY,
        name TEXT NOT NULL,
        cost REAL NOT NULL CHECK (cost > 0),
        due_day INTEGER NOT NULL CHECK (due_day BETWEEN 1 AND 31),
        last_paid_date TEXT,              -- NULL = never charged
        created_at TEXT NOT NULL,
        updated_at TEXT NOT NULL
    );
    """,
    """
    CREATE TABLE IF NOT EXISTS performance_courses (
        id TEXT PRIMARY KEY,
        semester INTEGER NOT NULL,
        name TEXT,
        sks INTEGER NOT NULL DEFAULT 0,
        grade TEXT,
        updated_at TEXT
    );
    """,
    """
    CREATE INDEX IF NOT EXISTS idx_performance_courses_semester
    ON performance_courses(semester);
    """,
    """
    CREATE TABLE IF NOT EXISTS performance_semesters (
        semester INTEGER PRIMARY KEY,
        ips REAL NOT NULL DEFAULT 0
    );
    """,
    """
    CREATE TABLE IF NOT EXISTS assignments (
        id TEXT PRIMARY KEY,
        title TEXT,
        course TEXT,
        type TEXT,
        status TEXT,
        deadline TEXT,
        note TEXT NOT NULL DEFAULT '',
        created_at TEXT NOT NULL,
        updated_at TEXT NOT NULL
    );
    """,
    """
    CREATE TABLE IF NOT EXISTS schedule_items (
        id TEXT PRIMARY KEY,
        day TEXT NOT NULL,
        start_time TEXT,
        end_time TEXT,
        course TEXT,
        location TEXT NOT NULL DEFAULT '',
        note TEXT NOT NULL DEFAULT '',
        updated_at TEXT NOT NULL
    );
    """,
]
