"""PKCS#11 return values, flags and information records of the Cryptoki API."""

from __future__ import annotations

import enum
from dataclasses import dataclass

from .pkcs11_ids import VENDOR_DEFINED

PKCS11_VERSION_MAJOR = 2
PKCS11_VERSION_MINOR = 40
PKCS11_VERSION_PATCH = 1

_ULONG_MAX = 0xFFFFFFFFFFFFFFFF

UNAVAILABLE_INFORMATION = _ULONG_MAX
"""Value reported for a numeric field whose information is not available."""
EFFECTIVELY_INFINITE = 0
INVALID_HANDLE = 0

DONT_BLOCK = 1
"""Flag for a slot-event wait that must not block."""


class ReturnValue(enum.IntEnum):
    """Cryptoki function return values (CKR_*)."""

    OK = 0x0000
    CANCEL = 0x0001
    HOST_MEMORY = 0x0002
    SLOT_ID_INVALID = 0x0003
    GENERAL_ERROR = 0x0005
    FUNCTION_FAILED = 0x0006
    ARGUMENTS_BAD = 0x0007
    NO_EVENT = 0x0008
    NEED_TO_CREATE_THREADS = 0x0009
    CANT_LOCK = 0x000A
    ATTRIBUTE_READ_ONLY = 0x0010
    ATTRIBUTE_SENSITIVE = 0x0011
    ATTRIBUTE_TYPE_INVALID = 0x0012
    ATTRIBUTE_VALUE_INVALID = 0x0013
    ACTION_PROHIBITED = 0x001B
    DATA_INVALID = 0x0020
    DATA_LEN_RANGE = 0x0021
    DEVICE_ERROR = 0x0030
    DEVICE_MEMORY = 0x0031
    DEVICE_REMOVED = 0x0032
    ENCRYPTED_DATA_INVALID = 0x0040
    ENCRYPTED_DATA_LEN_RANGE = 0x0041
    FUNCTION_CANCELED = 0x0050
    FUNCTION_NOT_PARALLEL = 0x0051
    FUNCTION_NOT_SUPPORTED = 0x0054
    KEY_HANDLE_INVALID = 0x0060
    KEY_SIZE_RANGE = 0x0062
    KEY_TYPE_INCONSISTENT = 0x0063
    KEY_NOT_NEEDED = 0x0064
    KEY_CHANGED = 0x0065
    KEY_NEEDED = 0x0066
    KEY_INDIGESTIBLE = 0x0067
    KEY_FUNCTION_NOT_PERMITTED = 0x0068
    KEY_NOT_WRAPPABLE = 0x0069
    KEY_UNEXTRACTABLE = 0x006A
    MECHANISM_INVALID = 0x0070
    MECHANISM_PARAM_INVALID = 0x0071
    OBJECT_HANDLE_INVALID = 0x0082
    OPERATION_ACTIVE = 0x0090
    OPERATION_NOT_INITIALIZED = 0x0091
    PIN_INCORRECT = 0x00A0
    PIN_INVALID = 0x00A1
    PIN_LEN_RANGE = 0x00A2
    PIN_EXPIRED = 0x00A3
    PIN_LOCKED = 0x00A4
    SESSION_CLOSED = 0x00B0
    SESSION_COUNT = 0x00B1
    SESSION_HANDLE_INVALID = 0x00B3
    SESSION_PARALLEL_NOT_SUPPORTED = 0x00B4
    SESSION_READ_ONLY = 0x00B5
    SESSION_EXISTS = 0x00B6
    SESSION_READ_ONLY_EXISTS = 0x00B7
    SESSION_READ_WRITE_SO_EXISTS = 0x00B8
    SIGNATURE_INVALID = 0x00C0
    SIGNATURE_LEN_RANGE = 0x00C1
    TEMPLATE_INCOMPLETE = 0x00D0
    TEMPLATE_INCONSISTENT = 0x00D1
    TOKEN_NOT_PRESENT = 0x00E0
    TOKEN_NOT_RECOGNIZED = 0x00E1
    TOKEN_WRITE_PROTECTED = 0x00E2
    UNWRAPPING_KEY_HANDLE_INVALID = 0x00F0
    UNWRAPPING_KEY_SIZE_RANGE = 0x00F1
    UNWRAPPING_KEY_TYPE_INCONSISTENT = 0x00F2
    USER_ALREADY_LOGGED_IN = 0x0100
    USER_NOT_LOGGED_IN = 0x0101
    USER_PIN_NOT_INITIALIZED = 0x0102
    USER_TYPE_INVALID = 0x0103
    USER_ANOTHER_ALREADY_LOGGED_IN = 0x0104
    USER_TOO_MANY_TYPES = 0x0105
    WRAPPED_KEY_INVALID = 0x0110
    WRAPPED_KEY_LEN_RANGE = 0x0112
    WRAPPING_KEY_HANDLE_INVALID = 0x0113
    WRAPPING_KEY_SIZE_RANGE = 0x0114
    WRAPPING_KEY_TYPE_INCONSISTENT = 0x0115
    RANDOM_SEED_NOT_SUPPORTED = 0x0120
    RANDOM_NO_RNG = 0x0121
    DOMAIN_PARAMS_INVALID = 0x0130
    CURVE_NOT_SUPPORTED = 0x0140
    BUFFER_TOO_SMALL = 0x0150
    SAVED_STATE_INVALID = 0x0160
    INFORMATION_SENSITIVE = 0x0170
    STATE_UNSAVEABLE = 0x0180
    CRYPTOKI_NOT_INITIALIZED = 0x0190
    CRYPTOKI_ALREADY_INITIALIZED = 0x0191
    MUTEX_BAD = 0x01A0
    MUTEX_NOT_LOCKED = 0x01A1
    NEW_PIN_MODE = 0x01B0
    NEXT_OTP = 0x01B1
    EXCEEDED_MAX_ITERATIONS = 0x01B5
    FIPS_SELF_TEST_FAILED = 0x01B6
    LIBRARY_LOAD_FAILED = 0x01B7
    PIN_TOO_WEAK = 0x01B8
    PUBLIC_KEY_INVALID = 0x01B9
    FUNCTION_REJECTED = 0x0200


class MechanismFlag(enum.IntFlag):
    """Capabilities of a mechanism (CKF_* of mechanism information)."""

    HW = 1 << 0
    ENCRYPT = 1 << 8
    DECRYPT = 1 << 9
    DIGEST = 1 << 10
    SIGN = 1 << 11
    SIGN_RECOVER = 1 << 12
    VERIFY = 1 << 13
    VERIFY_RECOVER = 1 << 14
    GENERATE = 1 << 15
    GENERATE_KEY_PAIR = 1 << 16
    WRAP = 1 << 17
    UNWRAP = 1 << 18
    DERIVE = 1 << 19
    EC_F_P = 1 << 20
    EC_F_2M = 1 << 21
    EC_ECPARAMETERS = 1 << 22
    EC_NAMEDCURVE = 1 << 23
    EC_UNCOMPRESS = 1 << 24
    EC_COMPRESS = 1 << 25
    EXTENSION = 1 << 31


class SlotFlag(enum.IntFlag):
    """Slot information flags."""

    TOKEN_PRESENT = 1 << 0
    REMOVABLE_DEVICE = 1 << 1
    HW_SLOT = 1 << 2


class TokenFlag(enum.IntFlag):
    """Token information flags."""

    RNG = 1 << 0
    WRITE_PROTECTED = 1 << 1
    LOGIN_REQUIRED = 1 << 2
    USER_PIN_INITIALIZED = 1 << 3
    RESTORE_KEY_NOT_NEEDED = 1 << 5
    CLOCK_ON_TOKEN = 1 << 6
    PROTECTED_AUTHENTICATION_PATH = 1 << 8
    DUAL_CRYPTO_OPERATIONS = 1 << 9
    TOKEN_INITIALIZED = 1 << 10
    SECONDARY_AUTHENTICATION = 1 << 11
    USER_PIN_COUNT_LOW = 1 << 16
    USER_PIN_FINAL_TRY = 1 << 17
    USER_PIN_LOCKED = 1 << 18
    USER_PIN_TO_BE_CHANGED = 1 << 19
    SO_PIN_COUNT_LOW = 1 << 20
    SO_PIN_FINAL_TRY = 1 << 21
    SO_PIN_LOCKED = 1 << 22
    SO_PIN_TO_BE_CHANGED = 1 << 23
    ERROR_STATE = 1 << 24


class SessionFlag(enum.IntFlag):
    """Session flags."""

    RW_SESSION = 1 << 1
    SERIAL_SESSION = 1 << 2


class SessionState(enum.IntEnum):
    """State of a session (CKS_*)."""

    RO_PUBLIC_SESSION = 0
    RO_USER_FUNCTIONS = 1
    RW_PUBLIC_SESSION = 2
    RW_USER_FUNCTIONS = 3
    RW_SO_FUNCTIONS = 4


class UserType(enum.IntEnum):
    """Kinds of user that can log in (CKU_*)."""

    SO = 0
    USER = 1
    CONTEXT_SPECIFIC = 2


class Notification(enum.IntEnum):
    """Events passed to an application notification callback (CKN_*)."""

    SURRENDER = 0
    OTP_CHANGED = 1


class InitializeFlag(enum.IntFlag):
    """Flags of the library initialisation arguments."""

    LIBRARY_CANT_CREATE_OS_THREADS = 1 << 0
    OS_LOCKING_OK = 1 << 1


def _check_ulong(name: str, value) -> int:
    value = int(value)
    if not 0 <= value <= _ULONG_MAX:
        raise ValueError(f"{name} must be an unsigned long, got {value}")
    return value


@dataclass(frozen=True)
class Version:
    """A major and minor version number, one byte each."""

    major: int = 0
    minor: int = 0

    def __post_init__(self):
        for name in ("major", "minor"):
            if not 0 <= getattr(self, name) <= 0xFF:
                raise ValueError(f"{name} must fit in one byte")

    def __str__(self) -> str:
        return f"{self.major}.{self.minor}"


CRYPTOKI_VERSION = Version(PKCS11_VERSION_MAJOR, PKCS11_VERSION_MINOR)


@dataclass(frozen=True)
class MechanismInfo:
    """Key size range and capabilities of a mechanism."""

    min_key_size: int = 0
    max_key_size: int = 0
    flags: MechanismFlag = MechanismFlag(0)

    def __post_init__(self):
        object.__setattr__(self, "min_key_size", _check_ulong("min_key_size", self.min_key_size))
        object.__setattr__(self, "max_key_size", _check_ulong("max_key_size", self.max_key_size))
        object.__setattr__(self, "flags", MechanismFlag(_check_ulong("flags", self.flags)))


@dataclass(frozen=True)
class SessionInfo:
    """Slot, state and flags of an open session."""

    slot_id: int
    state: SessionState
    flags: SessionFlag = SessionFlag.SERIAL_SESSION
    device_error: int = 0

    def __post_init__(self):
        object.__setattr__(self, "slot_id", _check_ulong("slot_id", self.slot_id))
        object.__setattr__(self, "state", SessionState(self.state))
        object.__setattr__(self, "flags", SessionFlag(_check_ulong("flags", self.flags)))
        object.__setattr__(self, "device_error", _check_ulong("device_error", self.device_error))

    @property
    def read_write(self) -> bool:
        """Whether the session was opened read/write."""
        return bool(self.flags & SessionFlag.RW_SESSION)


class Pkcs11Error(Exception):
    """A Cryptoki call that returned something other than OK."""

    def __init__(self, rv, message=None):
        rv = _check_ulong("rv", rv)
        if rv == ReturnValue.OK:
            raise ValueError("OK is not an error return value")
        try:
            self.rv: int = ReturnValue(rv)
            name = self.rv.name
        except ValueError:
            self.rv = rv
            name = "VENDOR_DEFINED" if rv & VENDOR_DEFINED else "UNKNOWN"
        self.message = message
        text = f"{name} (0x{rv:08x})"
        if message:
            text = f"{message}: {text}"
        super().__init__(text)


def check_rv(rv) -> ReturnValue:
    """Return OK for a successful return value, raise Pkcs11Error otherwise."""
    rv = _check_ulong("rv", rv)
    if rv != ReturnValue.OK:
        raise Pkcs11Error(rv)
    return ReturnValue.OK