"""
Electro Auth - Message Catalog.

Localized, user-facing messages for the auth error taxonomy and for system
settings display names. Provider internals never reach these strings.
"""

from enum import Enum
from typing import Literal

Locale = Literal["en", "tr"]


class AuthErrorCode(str, Enum):
    """Public auth error taxonomy."""

    INVALID_CREDENTIALS = "invalid-credentials"
    EMAIL_ALREADY_IN_USE = "email-already-in-use"
    WEAK_PASSWORD = "weak-password"
    ACCOUNT_DISABLED = "account-disabled"
    USER_NOT_FOUND = "user-not-found"
    RATE_LIMITED = "rate-limited"
    NETWORK_UNAVAILABLE = "network-unavailable"
    USER_CANCELLED = "user-cancelled"
    INVALID_EMAIL = "invalid-email"
    NOT_AUTHENTICATED = "not-authenticated"
    UNKNOWN = "unknown"


AUTH_MESSAGES: dict[AuthErrorCode, dict[str, str]] = {
    AuthErrorCode.INVALID_CREDENTIALS: {
        "en": "Invalid login credentials",
        "tr": "Geçersiz giriş bilgileri",
    },
    AuthErrorCode.EMAIL_ALREADY_IN_USE: {
        "en": "This email address is already in use",
        "tr": "Bu e-posta adresi zaten kullanımda",
    },
    AuthErrorCode.WEAK_PASSWORD: {
        "en": "Password is too weak, must be at least 6 characters",
        "tr": "Şifre çok zayıf, en az 6 karakter olmalı",
    },
    AuthErrorCode.ACCOUNT_DISABLED: {
        "en": "This account has been disabled",
        "tr": "Bu hesap devre dışı bırakılmış",
    },
    AuthErrorCode.USER_NOT_FOUND: {
        "en": "No user account found with this email address",
        "tr": "Bu e-posta adresi ile kayıtlı hesap bulunamadı",
    },
    AuthErrorCode.RATE_LIMITED: {
        "en": "Too many failed attempts. Please try again later",
        "tr": "Çok fazla başarısız deneme. Lütfen daha sonra tekrar deneyin",
    },
    AuthErrorCode.NETWORK_UNAVAILABLE: {
        "en": "Network connection error. Please check your internet connection",
        "tr": "Ağ bağlantısı hatası. İnternet bağlantınızı kontrol edin",
    },
    AuthErrorCode.USER_CANCELLED: {
        "en": "Sign-in process was cancelled",
        "tr": "Giriş işlemi iptal edildi",
    },
    AuthErrorCode.INVALID_EMAIL: {
        "en": "Invalid email address format",
        "tr": "Geçersiz e-posta adresi",
    },
    AuthErrorCode.NOT_AUTHENTICATED: {
        "en": "No authenticated user found",
        "tr": "Kimlik doğrulanmış kullanıcı bulunamadı",
    },
    AuthErrorCode.UNKNOWN: {
        "en": "An unexpected error occurred. Please try again",
        "tr": "Beklenmeyen bir hata oluştu. Lütfen tekrar deneyin",
    },
}


SETTING_DISPLAY_NAMES: dict[str, dict[str, str]] = {
    "userRegistration": {"en": "User Registration", "tr": "Kullanıcı Kaydı"},
    "emailVerificationRequired": {"en": "Email Verification Requirement", "tr": "Email Doğrulama Zorunluluğu"},
    "businessAccountApproval": {"en": "Business Account Approval", "tr": "İşletme Hesap Onayı"},
    "maintenanceMode": {"en": "Maintenance Mode", "tr": "Bakım Modu"},
    "emailNotifications": {"en": "Email Notifications", "tr": "Email Bildirimleri"},
    "sessionTimeout": {"en": "Session Timeout", "tr": "Oturum Zaman Aşımı"},
    "autoBackup": {"en": "Automatic Backup", "tr": "Otomatik Yedekleme"},
    "analyticsEnabled": {"en": "Analytics Tracking", "tr": "Analitik Takibi"},
    "maxFileSize": {"en": "Maximum File Size", "tr": "Maksimum Dosya Boyutu"},
    "allowedFileTypes": {"en": "Allowed File Types", "tr": "İzin Verilen Dosya Türleri"},
}

SETTING_UPDATE_FAILED: dict[str, str] = {
    "en": "{name} could not be updated: {reason}",
    "tr": "{name} güncellenemedi: {reason}",
}

SETTING_UPDATE_FALLBACK_REASON: dict[str, str] = {
    "en": "Update failed",
    "tr": "Güncelleme başarısız oldu",
}


def get_auth_error_message(code: AuthErrorCode | str, locale: Locale = "tr") -> str:
    """Localized message for an auth error code, falling back to `unknown`."""
    try:
        key = AuthErrorCode(code)
    except ValueError:
        key = AuthErrorCode.UNKNOWN
    messages = AUTH_MESSAGES[key]
    return messages.get(locale, messages["en"])


def get_setting_display_name(key: str, locale: Locale = "tr") -> str:
    """Human readable setting name; unknown keys are shown as-is."""
    names = SETTING_DISPLAY_NAMES.get(key)
    if not names:
        return key
    return names.get(locale, names["en"])


def setting_update_failed_message(key: str, reason: str | None, locale: Locale = "tr") -> str:
    """Failure message for a setting write, always naming the setting."""
    template = SETTING_UPDATE_FAILED.get(locale, SETTING_UPDATE_FAILED["en"])
    fallback = SETTING_UPDATE_FALLBACK_REASON.get(locale, SETTING_UPDATE_FALLBACK_REASON["en"])
    return template.format(name=get_setting_display_name(key, locale), reason=reason or fallback)
