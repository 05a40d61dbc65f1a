"""
SQL statements for both stores.

Statement text is fixed here; every variable value is bound through
positional parameters ($1, $2, ...) at the call site.
"""

# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------

CREATE_MESSAGES_TABLE = """
    CREATE TABLE IF NOT EXISTS messages (
        id BIGSERIAL PRIMARY KEY,
        role VARCHAR(20) NOT NULL,
        content TEXT NOT NULL DEFAULT '',
        parent_id BIGINT NULL,
        attachment_id BIGINT NULL,
        attachment_url TEXT NULL,
        attachment_name VARCHAR(255) NULL,
        attachment_type VARCHAR(100) NULL,
        conversation_id VARCHAR(255) NULL,
        created_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
    )
"""

CREATE_MESSAGES_INDEXES = (
    "CREATE INDEX IF NOT EXISTS idx_messages_created_at ON messages (created_at)",
    "CREATE INDEX IF NOT EXISTS idx_messages_conversation "
    "ON messages (conversation_id, created_at)",
)

CREATE_ATTACHMENTS_TABLE = """
    CREATE TABLE IF NOT EXISTS attachments (
        id BIGSERIAL PRIMARY KEY,
        filename VARCHAR(255) NOT NULL,
        mime_type VARCHAR(100) NOT NULL,
        file_data BYTEA NOT NULL,
        conversation_id VARCHAR(255) NULL,
        created_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
    )
"""

CREATE_ATTACHMENTS_INDEXES = (
    "CREATE INDEX IF NOT EXISTS idx_attachments_created_at "
    "ON attachments (created_at)",
    "CREATE INDEX IF NOT EXISTS idx_attachments_conversation "
    "ON attachments (conversation_id, created_at)",
)

# ---------------------------------------------------------------------------
# Text store: messages
# ---------------------------------------------------------------------------

MESSAGE_COLUMNS = (
    "id, role, content, parent_id, attachment_id, attachment_url, "
    "attachment_name, attachment_type, created_at, conversation_id"
)

INSERT_MESSAGE = """
    INSERT INTO messages
        (role, content, parent_id, attachment_id, attachment_url,
         attachment_name, attachment_type, conversation_id)
    VALUES ($1, $2, $3, $4, $5, $6, $7, $8)
    RETURNING id
"""

SELECT_MESSAGES = f"""
    SELECT {MESSAGE_COLUMNS}
    FROM messages
    ORDER BY created_at ASC, id ASC
    LIMIT $1
"""

SELECT_CONVERSATION_MESSAGES = f"""
    SELECT {MESSAGE_COLUMNS}
    FROM messages
    WHERE conversation_id = $1
    ORDER BY created_at ASC, id ASC
    LIMIT $2
"""

SELECT_MESSAGE_ANCHOR = """
    SELECT id, created_at, conversation_id
    FROM messages
    WHERE id = $1
"""

DELETE_MESSAGE = "DELETE FROM messages WHERE id = $1"

DELETE_MESSAGES_SINCE = "DELETE FROM messages WHERE created_at >= $1"

DELETE_CONVERSATION_MESSAGES_SINCE = (
    "DELETE FROM messages WHERE conversation_id = $1 AND created_at >= $2"
)

DELETE_CONVERSATION_MESSAGES = "DELETE FROM messages WHERE conversation_id = $1"

DELETE_ALL_MESSAGES = "DELETE FROM messages"

DELETE_EXPIRED_MESSAGES = (
    "DELETE FROM messages WHERE created_at < NOW() - $1::interval"
)

# ---------------------------------------------------------------------------
# Files store: attachments
# ---------------------------------------------------------------------------

INSERT_ATTACHMENT = """
    INSERT INTO attachments (filename, mime_type, file_data, conversation_id)
    VALUES ($1, $2, $3, $4)
    RETURNING id
"""

SELECT_ATTACHMENT = """
    SELECT id, filename, mime_type, file_data
    FROM attachments
    WHERE id = $1
"""

DELETE_ATTACHMENT = "DELETE FROM attachments WHERE id = $1"

DELETE_ATTACHMENTS_SINCE = "DELETE FROM attachments WHERE created_at >= $1"

DELETE_CONVERSATION_ATTACHMENTS_SINCE = (
    "DELETE FROM attachments WHERE conversation_id = $1 AND created_at >= $2"
)

DELETE_CONVERSATION_ATTACHMENTS = "DELETE FROM attachments WHERE conversation_id = $1"

DELETE_ALL_ATTACHMENTS = "DELETE FROM attachments"

DELETE_EXPIRED_ATTACHMENTS = (
    "DELETE FROM attachments WHERE created_at < NOW() - $1::interval"
)
