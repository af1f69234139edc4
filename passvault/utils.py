import platform
import os
import stat
import logging
from typing import Union

from . import config

logger = logging.getLogger(__name__)

if platform.system() == "Windows":
    try:
        import win32security
        import win32api
        import win32con
        import win32file
        WINDOWS_SECURITY_AVAILABLE = True
    except ImportError:
        logger.warning("pywin32 not fully installed, cannot set Windows file permissions securely.")
        WINDOWS_SECURITY_AVAILABLE = False
else:
    WINDOWS_SECURITY_AVAILABLE = False

PathLike = Union[str, os.PathLike]


def configure_logging(level: int = logging.INFO) -> None:
    """Configure root logging for an application embedding the vault."""
    logging.basicConfig(level=level, format=config.LOG_FORMAT)


def default_vault_path() -> str:
    """Return the default vault location, creating its directory if needed."""
    app_dir = os.path.join(os.path.expanduser("~"), config.CONFIG_DIR_NAME)
    os.makedirs(app_dir, exist_ok=True)
    return os.path.join(app_dir, config.DEFAULT_VAULT_FILE)


def atomic_write(filepath: PathLike, data: bytes) -> None:
    """
    Write data to filepath via a temporary file and an atomic rename.

    Either the old file or the complete new one is on disk afterwards, never a
    partial write. The temporary file is removed if anything fails.

    Raises:
        OSError: If the temporary file cannot be written or renamed
    """
    filepath = os.fspath(filepath)
    tmp_path = filepath + config.TEMP_FILE_SUFFIX
    if os.path.exists(tmp_path):
        os.remove(tmp_path)
    try:
        # 0o600 from creation, not only after the rename.
        fd = os.open(tmp_path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC | getattr(os, "O_BINARY", 0), 0o600)
        with os.fdopen(fd, "wb") as f:
            f.write(data)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp_path, filepath)
    except OSError:
        if os.path.exists(tmp_path):
            os.remove(tmp_path)
        raise


def set_owner_only_permissions(filepath: PathLike) -> bool:
    """Set file to be readable/writable by owner only."""
    filepath = os.fspath(filepath)
    if platform.system() == 'Windows':
        return _set_windows_file_permissions(filepath)
    try:
        os.chmod(filepath, stat.S_IRUSR | stat.S_IWUSR)  # 600
    except OSError as e:
        logger.warning(f"Failed to chmod {filepath}: {e}")
        return False
    return True


def _set_windows_file_permissions(filepath: str) -> bool:
    """
    Sets restrictive permissions on a file for Windows, granting full control
    only to the current user/owner and removing access for others.
    """
    if not WINDOWS_SECURITY_AVAILABLE:
        logger.warning(f"Skipping Windows file permission setting for {filepath}: pywin32 not available.")
        return False

    try:
        current_user_name = win32api.GetUserName()
        current_user_sid, _, _ = win32security.LookupAccountName(None, current_user_name)

        dacl = win32security.ACL()
        dacl.AddAccessAllowedAce(
            win32security.ACL_REVISION,
            win32con.GENERIC_READ | win32con.GENERIC_WRITE,
            current_user_sid
        )

        file_handle = win32file.CreateFile(
            filepath,
            win32con.WRITE_DAC,
            win32file.FILE_SHARE_READ | win32file.FILE_SHARE_WRITE | win32file.FILE_SHARE_DELETE,
            None,
            win32con.OPEN_EXISTING,
            win32con.FILE_ATTRIBUTE_NORMAL,
            None
        )

        try:
            win32security.SetSecurityInfo(
                file_handle,
                win32security.SE_FILE_OBJECT,
                win32security.DACL_SECURITY_INFORMATION | win32security.PROTECTED_DACL_SECURITY_INFORMATION,
                None,
                None,
                dacl,
                None
            )
            logger.info(f"Set restrictive permissions for {filepath} on Windows.")
        finally:
            win32file.CloseHandle(file_handle)
    except win32api.error as e:
        if e.winerror == 5:  # Access is denied
            logger.warning(f"Could not harden Windows permissions for {filepath}: Access is denied. The vault was written but its ACL is unchanged.")
        else:
            logger.error(f"Failed to set Windows file permissions for {filepath}: {e}")
        return False
    return True
