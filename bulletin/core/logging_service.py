"""
Centralized logging service for Bulletin.
Provides structured logging with database storage and easy integration.
"""

import json
import logging
import traceback
from datetime import datetime, timedelta

from flask import request, has_request_context, g

from .config import get_config_value
from .database import Database

_std_logger = logging.getLogger('bulletin')


class LoggingService:
    """Centralized logging service for application-wide logging"""

    @staticmethod
    def _log_db():
        return get_config_value('LOG_DB')

    @staticmethod
    def _ensure_logs_table(conn):
        """Ensure the app_logs table exists"""
        cursor = conn.cursor()
        cursor.execute("""
            CREATE TABLE IF NOT EXISTS app_logs (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                timestamp TEXT NOT NULL,
                level TEXT NOT NULL,
                source TEXT NOT NULL,
                message TEXT NOT NULL,
                details TEXT,
                ip_address TEXT,
                user_agent TEXT,
                request_method TEXT,
                request_path TEXT,
                user_id TEXT
            )
        """)
        cursor.execute("""
            CREATE INDEX IF NOT EXISTS idx_logs_timestamp
            ON app_logs(timestamp DESC)
        """)

    @staticmethod
    def _get_request_context():
        """Extract request context information"""
        if not has_request_context():
            return None, None, None, None, None

        ip_address = request.headers.get('X-Forwarded-For', request.remote_addr)
        if ip_address and ',' in ip_address:
            ip_address = ip_address.split(',')[0].strip()

        user_id = None
        auth = g.get('auth')
        if auth is not None and auth.user is not None:
            user_id = str(auth.user.id)

        return ip_address, request.headers.get('User-Agent', ''), request.method, request.path, user_id

    @staticmethod
    def log(level, source, message, details=None, user_id=None):
        """
        Log a message to the log database and the standard logger.

        Args:
            level (str): Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
            source (str): Source component (auth, news, api, ...)
            message (str): Main log message
            details (str/dict): Additional details (JSON-encoded if dict)
            user_id (str): Optional user identifier, defaults to the request's user
        """
        level = level.upper()
        _std_logger.log(getattr(logging, level, logging.INFO), "[%s] %s", source, message)

        ip_address, user_agent, method, path, request_user = LoggingService._get_request_context()
        if user_id is None:
            user_id = request_user
        if isinstance(details, dict):
            details = json.dumps(details, indent=2, default=str)

        log_db = LoggingService._log_db()
        if not log_db:
            return

        try:
            with Database.connect(log_db) as conn:
                LoggingService._ensure_logs_table(conn)
                conn.execute("""
                    INSERT INTO app_logs
                    (timestamp, level, source, message, details, ip_address, user_agent,
                     request_method, request_path, user_id)
                    VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """, (
                    datetime.now().isoformat(), level, source, message, details,
                    ip_address, user_agent, method, path, user_id
                ))
                conn.commit()
        except Exception as e:
            # Fall back to the standard logger only
            _std_logger.warning("Logging service error: %s", e)

    @staticmethod
    def debug(source, message, details=None, user_id=None):
        LoggingService.log('DEBUG', source, message, details, user_id)

    @staticmethod
    def info(source, message, details=None, user_id=None):
        LoggingService.log('INFO', source, message, details, user_id)

    @staticmethod
    def warning(source, message, details=None, user_id=None):
        LoggingService.log('WARNING', source, message, details, user_id)

    @staticmethod
    def error(source, message, details=None, user_id=None):
        LoggingService.log('ERROR', source, message, details, user_id)

    @staticmethod
    def critical(source, message, details=None, user_id=None):
        LoggingService.log('CRITICAL', source, message, details, user_id)

    @staticmethod
    def log_user_action(source, action, user_id=None, details=None):
        """Log user actions (login, register, profile update, ...)"""
        LoggingService.info(source, f"User action: {action}", details, user_id)

    @staticmethod
    def log_api_call(source, endpoint, method='GET', status_code=200, details=None):
        """Log API calls"""
        message = f"API {method} {endpoint} - Status: {status_code}"
        level = 'INFO' if 200 <= status_code < 400 else 'WARNING' if status_code < 500 else 'ERROR'
        LoggingService.log(level, source, message, details)

    @staticmethod
    def log_error_with_traceback(source, error, details=None):
        """Log error with full traceback"""
        error_details = {
            'error_type': type(error).__name__,
            'error_message': str(error),
            'traceback': ''.join(traceback.format_exception(type(error), error, error.__traceback__))
        }
        if details:
            error_details['additional_details'] = details

        LoggingService.error(source, f"Exception occurred: {type(error).__name__}", error_details)

    @staticmethod
    def log_security_event(message, details=None):
        """Log security-related events"""
        LoggingService.warning('security', message, details)

    @staticmethod
    def recent(limit=20, level=None):
        """Most recent log entries, newest first"""
        log_db = LoggingService._log_db()
        if not log_db:
            return []
        try:
            with Database.connect(log_db) as conn:
                LoggingService._ensure_logs_table(conn)
                if level:
                    rows = conn.execute("""
                        SELECT * FROM app_logs WHERE level = ?
                        ORDER BY id DESC LIMIT ?
                    """, (level.upper(), limit)).fetchall()
                else:
                    rows = conn.execute("""
                        SELECT * FROM app_logs ORDER BY id DESC LIMIT ?
                    """, (limit,)).fetchall()
                return [dict(row) for row in rows]
        except Exception as e:
            _std_logger.warning("Failed to read logs: %s", e)
            return []

    @staticmethod
    def cleanup_old_logs(days_to_keep=30):
        """Clean up old log entries"""
        log_db = LoggingService._log_db()
        if not log_db:
            return 0
        cutoff_iso = (datetime.now() - timedelta(days=days_to_keep)).isoformat()

        try:
            with Database.connect(log_db) as conn:
                LoggingService._ensure_logs_table(conn)
                cursor = conn.execute("DELETE FROM app_logs WHERE timestamp < ?", (cutoff_iso,))
                deleted_count = cursor.rowcount
                conn.commit()
        except Exception as e:
            LoggingService.error('system', f"Failed to cleanup old logs: {e}")
            return 0

        LoggingService.info('system', f"Cleaned up {deleted_count} old log entries")
        return deleted_count


# Convenience instance for easy importing
logger = LoggingService()
