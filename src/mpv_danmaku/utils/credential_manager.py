import json
import logging
from pathlib import Path

import keyring
from keyring.errors import KeyringError
from cryptography.fernet import Fernet, InvalidToken
from platformdirs import user_data_dir

from ..config.app_config import AppInfo
from ..core.state import ApiAuthConfig


KEYRING_SERVICE_NAME = f"{AppInfo.NAME_EN}-CredentialsKey"
KEYRING_USERNAME = "default_user"
CREDENTIALS_FILE_NAME = "credentials.json"

logger = logging.getLogger("CredentialManager")


def get_credentials_filepath() -> Path:
    """获取凭证文件的完整路径"""
    credentials_dir = Path(user_data_dir(AppInfo.NAME_EN, AppInfo.AUTHOR, ensure_exists=True))
    return credentials_dir / CREDENTIALS_FILE_NAME

def _get_encryption_key() -> bytes:
    """
    从系统密钥环获取加密密钥。
    如果不存在，则生成一个新的密钥并存储。
    """
    key_str = keyring.get_password(KEYRING_SERVICE_NAME, KEYRING_USERNAME)
    if key_str:
        return key_str.encode('utf-8')

    new_key = Fernet.generate_key()
    keyring.set_password(KEYRING_SERVICE_NAME, KEYRING_USERNAME, new_key.decode('utf-8'))
    logger.info("已生成新的加密密钥并存储在系统密钥环中。")
    return new_key

def load_credentials() -> dict:
    """
    从加密的 credentials.json 加载弹弹Play的 AppId / AppSecret。
    文件不存在或解密失败时返回空凭证。
    """
    credentials_file = get_credentials_filepath()
    default_credentials = {'APP_ID': '', 'APP_SECRET': ''}

    if not credentials_file.exists():
        return default_credentials

    try:
        fernet = Fernet(_get_encryption_key())
        decrypted_data = fernet.decrypt(credentials_file.read_bytes())
        credentials = json.loads(decrypted_data.decode('utf-8'))
        logger.info("凭证已成功加载和解密。")
        return {**default_credentials, **credentials}
    except (InvalidToken, json.JSONDecodeError) as e:
        logger.warning(f"无法解密凭证: {e}，返回空凭证。")
        try:
            credentials_file.unlink()
            logger.info(f"已删除损坏的凭证文件: {credentials_file}")
        except OSError as del_e:
            logger.error(f"无法删除损坏的凭证文件: {del_e}")
        return default_credentials
    except KeyringError as e:
        logger.warning(f"系统密钥环不可用，将以匿名方式访问: {e}")
        return default_credentials

def save_credentials(app_id: str, app_secret: str) -> bool:
    """将 AppId 和 AppSecret 加密后写入 credentials.json 中。"""
    app_id = app_id.strip()
    app_secret = app_secret.strip()
    if not app_id or not app_secret:
        logger.info("凭证为空，不保存凭证文件。")
        return False

    json_bytes = json.dumps({'APP_ID': app_id, 'APP_SECRET': app_secret}).encode('utf-8')
    try:
        encrypted_bytes = Fernet(_get_encryption_key()).encrypt(json_bytes)

        credentials_file = get_credentials_filepath()
        credentials_file.write_bytes(encrypted_bytes)
    except (KeyringError, OSError) as e:
        logger.error(f"保存加密凭证失败: {e}", exc_info=True)
        return False

    logger.info(f"凭证已安全保存到 {credentials_file}")
    return True

def load_auth_config(use_system_proxy: bool = True) -> ApiAuthConfig:
    """读取已保存的凭证并生成 API 配置"""
    credentials = load_credentials()
    return ApiAuthConfig(
        app_id=credentials['APP_ID'],
        app_secret=credentials['APP_SECRET'],
        use_system_proxy=use_system_proxy
    )
