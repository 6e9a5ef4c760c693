"""SQLite-backed persistence for the endpoint snapshot, with a JSON backup file."""

import json
import logging
import sqlite3
from pathlib import Path

from api_forward.models.endpoints import DEFAULT_GROUP, Snapshot, UrlConstruction

logger = logging.getLogger(__name__)

SCHEMA = """
CREATE TABLE IF NOT EXISTS global_settings (
    id INTEGER PRIMARY KEY CHECK (id = 1),
    base_tag TEXT DEFAULT '',
    updated_at DATETIME DEFAULT CURRENT_TIMESTAMP
);
CREATE TABLE IF NOT EXISTS api_endpoints (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    api_key TEXT NOT NULL UNIQUE,
    group_name TEXT DEFAULT '默认分组',
    description TEXT DEFAULT '',
    url TEXT NOT NULL,
    method TEXT DEFAULT 'redirect',
    url_construction TEXT,
    model_name TEXT,
    proxy_image_url_field TEXT,
    proxy_image_url_field_from_param INTEGER DEFAULT 0,
    proxy_fallback_action TEXT DEFAULT 'returnJson',
    type TEXT DEFAULT 'image',
    created_at DATETIME DEFAULT CURRENT_TIMESTAMP,
    updated_at DATETIME DEFAULT CURRENT_TIMESTAMP
);
CREATE TABLE IF NOT EXISTS query_params (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    endpoint_id INTEGER NOT NULL,
    name TEXT NOT NULL,
    description TEXT DEFAULT '',
    required INTEGER DEFAULT 0,
    default_value TEXT,
    valid_values TEXT,
    sort_order INTEGER DEFAULT 0,
    FOREIGN KEY (endpoint_id) REFERENCES api_endpoints(id) ON DELETE CASCADE
);
CREATE INDEX IF NOT EXISTS idx_endpoints_api_key ON api_endpoints(api_key);
CREATE INDEX IF NOT EXISTS idx_endpoints_group ON api_endpoints(group_name);
CREATE INDEX IF NOT EXISTS idx_params_endpoint ON query_params(endpoint_id);
"""

UPSERT_ENDPOINT = """
INSERT INTO api_endpoints
(api_key, group_name, description, url, method, url_construction, model_name,
 proxy_image_url_field, proxy_image_url_field_from_param, proxy_fallback_action,
 type, updated_at)
VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, datetime('now'))
ON CONFLICT(api_key) DO UPDATE SET
    group_name = excluded.group_name,
    description = excluded.description,
    url = excluded.url,
    method = excluded.method,
    url_construction = excluded.url_construction,
    model_name = excluded.model_name,
    proxy_image_url_field = excluded.proxy_image_url_field,
    proxy_image_url_field_from_param = excluded.proxy_image_url_field_from_param,
    proxy_fallback_action = excluded.proxy_fallback_action,
    type = excluded.type,
    updated_at = datetime('now')
"""


class ConfigStore:
    """
    Persist endpoint snapshots in SQLite.

    The database is the source of truth. A JSON copy of the last loaded or
    saved snapshot is written next to it when file operations are enabled,
    and is read back when the database holds no endpoints yet.
    """

    def __init__(
        self,
        db_path: Path,
        backup_path: Path | None = None,
        enable_file_operations: bool = True,
    ):
        self.db_path = Path(db_path)
        self.backup_path = Path(backup_path) if backup_path else None
        self.enable_file_operations = enable_file_operations
        if not self.db_path.parent.exists():
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._ensure_schema()
        logger.info(f"SQLite database initialized at: {self.db_path}")

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA foreign_keys = ON")
        return conn

    def _ensure_schema(self) -> None:
        conn = self._connect()
        try:
            conn.executescript(SCHEMA)
        finally:
            conn.close()

    def load(self) -> Snapshot:
        """Load the current snapshot from the database, the backup, or empty."""
        conn = self._connect()
        try:
            snapshot = self._load_from_db(conn)
        finally:
            conn.close()

        if snapshot is not None:
            logger.info(f"Configuration loaded: {len(snapshot.endpoints)} endpoints.")
        elif self.backup_path is not None and self.backup_path.exists():
            with open(self.backup_path, encoding="utf-8") as f:
                snapshot = Snapshot.model_validate(json.load(f))
            logger.info("Configuration loaded from local file.")
        else:
            logger.info("No configuration found. Using default.")
            snapshot = Snapshot()

        self._write_backup(snapshot)
        return snapshot

    def _load_from_db(self, conn: sqlite3.Connection) -> Snapshot | None:
        endpoints = conn.execute("SELECT * FROM api_endpoints").fetchall()
        if not endpoints:
            return None

        settings = conn.execute(
            "SELECT base_tag FROM global_settings WHERE id = 1"
        ).fetchone()
        params = conn.execute(
            "SELECT * FROM query_params ORDER BY endpoint_id, sort_order"
        ).fetchall()

        params_by_endpoint: dict[int, list[dict]] = {}
        for p in params:
            params_by_endpoint.setdefault(p["endpoint_id"], []).append(
                {
                    "name": p["name"],
                    "description": p["description"] or "",
                    "required": p["required"] == 1,
                    "defaultValue": p["default_value"] or None,
                    "validValues": (
                        json.loads(p["valid_values"]) if p["valid_values"] else None
                    ),
                }
            )

        api_urls = {}
        for ep in endpoints:
            api_urls[ep["api_key"]] = {
                "group": ep["group_name"] or DEFAULT_GROUP,
                "description": ep["description"] or "",
                "url": ep["url"] or "",
                "method": ep["method"] or "redirect",
                "type": ep["type"] or "image",
                "urlConstruction": ep["url_construction"],
                "modelName": ep["model_name"],
                "queryParams": params_by_endpoint.get(ep["id"], []),
                "proxySettings": {
                    "imageUrlField": ep["proxy_image_url_field"] or None,
                    "imageUrlFieldFromParam": (
                        True if ep["proxy_image_url_field_from_param"] == 1 else None
                    ),
                    "fallbackAction": ep["proxy_fallback_action"] or "returnJson",
                },
            }

        return Snapshot.model_validate(
            {"apiUrls": api_urls, "baseTag": settings["base_tag"] if settings else ""}
        )

    def save(self, snapshot: Snapshot) -> None:
        """Persist ``snapshot`` in a single transaction.

        Raises:
            sqlite3.Error: When the database write fails; nothing is committed.
        """
        conn = self._connect()
        try:
            with conn:
                self._save(conn, snapshot)
        finally:
            conn.close()
        logger.info("Configuration saved to database.")
        self._write_backup(snapshot)

    def _save(self, conn: sqlite3.Connection, snapshot: Snapshot) -> None:
        conn.execute(
            "INSERT OR REPLACE INTO global_settings (id, base_tag, updated_at) "
            "VALUES (1, ?, datetime('now'))",
            (snapshot.base_tag,),
        )

        existing = [
            row["api_key"]
            for row in conn.execute("SELECT api_key FROM api_endpoints").fetchall()
        ]
        for key in existing:
            if key not in snapshot.endpoints:
                conn.execute("DELETE FROM api_endpoints WHERE api_key = ?", (key,))

        for key, ep in snapshot.endpoints.items():
            settings = ep.proxy_settings
            url_construction = (
                None
                if ep.url_construction is UrlConstruction.GENERIC
                else ep.url_construction.value
            )
            conn.execute(
                UPSERT_ENDPOINT,
                (
                    key,
                    ep.group or DEFAULT_GROUP,
                    ep.description,
                    ep.url,
                    ep.method or "redirect",
                    url_construction,
                    ep.model_name,
                    settings.image_url_field,
                    1 if settings.image_url_field_from_param else 0,
                    settings.fallback_action,
                    ep.type,
                ),
            )
            endpoint_id = conn.execute(
                "SELECT id FROM api_endpoints WHERE api_key = ?", (key,)
            ).fetchone()["id"]
            conn.execute(
                "DELETE FROM query_params WHERE endpoint_id = ?", (endpoint_id,)
            )
            conn.executemany(
                "INSERT INTO query_params (endpoint_id, name, description, required, "
                "default_value, valid_values, sort_order) VALUES (?, ?, ?, ?, ?, ?, ?)",
                [
                    (
                        endpoint_id,
                        p.name,
                        p.description,
                        1 if p.required else 0,
                        p.default_value,
                        json.dumps(p.valid_values) if p.valid_values is not None else None,
                        i,
                    )
                    for i, p in enumerate(ep.query_params)
                ],
            )

    def _write_backup(self, snapshot: Snapshot) -> None:
        if not self.enable_file_operations or self.backup_path is None:
            return
        try:
            with open(self.backup_path, "w", encoding="utf-8") as f:
                json.dump(snapshot.to_wire(), f, ensure_ascii=False, indent=2)
        except OSError as e:
            logger.error(f"Backup write failed: {e}")
