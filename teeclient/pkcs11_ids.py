"""PKCS#11 identifiers: attributes, object classes, key types and mechanisms."""

from __future__ import annotations

import enum

ARRAY_ATTRIBUTE = 1 << 30
"""Flag set in the identifier of attributes whose value is an attribute array."""

VENDOR_DEFINED = 1 << 31
"""Flag set in attribute, class, key type and mechanism ids defined by a vendor."""


class Attribute(enum.IntEnum):
    """Object attribute identifiers (CKA_*)."""

    CLASS = 0x0000
    TOKEN = 0x0001
    PRIVATE = 0x0002
    LABEL = 0x0003
    APPLICATION = 0x0010
    VALUE = 0x0011
    OBJECT_ID = 0x0012
    CERTIFICATE_TYPE = 0x0080
    ISSUER = 0x0081
    SERIAL_NUMBER = 0x0082
    AC_ISSUER = 0x0083
    OWNER = 0x0084
    ATTR_TYPES = 0x0085
    TRUSTED = 0x0086
    CERTIFICATE_CATEGORY = 0x0087
    JAVA_MIDP_SECURITY_DOMAIN = 0x0088
    URL = 0x0089
    HASH_OF_SUBJECT_PUBLIC_KEY = 0x008A
    HASH_OF_ISSUER_PUBLIC_KEY = 0x008B
    NAME_HASH_ALGORITHM = 0x008C
    CHECK_VALUE = 0x0090
    KEY_TYPE = 0x0100
    SUBJECT = 0x0101
    ID = 0x0102
    SENSITIVE = 0x0103
    ENCRYPT = 0x0104
    DECRYPT = 0x0105
    WRAP = 0x0106
    UNWRAP = 0x0107
    SIGN = 0x0108
    SIGN_RECOVER = 0x0109
    VERIFY = 0x010A
    VERIFY_RECOVER = 0x010B
    DERIVE = 0x010C
    START_DATE = 0x0110
    END_DATE = 0x0111
    MODULUS = 0x0120
    MODULUS_BITS = 0x0121
    PUBLIC_EXPONENT = 0x0122
    PRIVATE_EXPONENT = 0x0123
    PRIME_1 = 0x0124
    PRIME_2 = 0x0125
    EXPONENT_1 = 0x0126
    EXPONENT_2 = 0x0127
    COEFFICIENT = 0x0128
    PUBLIC_KEY_INFO = 0x0129
    PRIME = 0x0130
    SUBPRIME = 0x0131
    BASE = 0x0132
    PRIME_BITS = 0x0133
    SUBPRIME_BITS = 0x0134
    VALUE_BITS = 0x0160
    VALUE_LEN = 0x0161
    EXTRACTABLE = 0x0162
    LOCAL = 0x0163
    NEVER_EXTRACTABLE = 0x0164
    ALWAYS_SENSITIVE = 0x0165
    KEY_GEN_MECHANISM = 0x0166
    MODIFIABLE = 0x0170
    COPYABLE = 0x0171
    DESTROYABLE = 0x0172
    EC_PARAMS = 0x0180
    EC_POINT = 0x0181
    ALWAYS_AUTHENTICATE = 0x0202
    WRAP_WITH_TRUSTED = 0x0210
    WRAP_TEMPLATE = 0x0211 | ARRAY_ATTRIBUTE
    UNWRAP_TEMPLATE = 0x0212 | ARRAY_ATTRIBUTE
    DERIVE_TEMPLATE = 0x0213 | ARRAY_ATTRIBUTE
    OTP_FORMAT = 0x0220
    OTP_LENGTH = 0x0221
    OTP_TIME_INTERVAL = 0x0222
    OTP_USER_FRIENDLY_MODE = 0x0223
    OTP_CHALLENGE_REQUIREMENT = 0x0224
    OTP_TIME_REQUIREMENT = 0x0225
    OTP_COUNTER_REQUIREMENT = 0x0226
    OTP_PIN_REQUIREMENT = 0x0227
    OTP_COUNTER = 0x022E
    OTP_TIME = 0x022F
    OTP_USER_IDENTIFIER = 0x022A
    OTP_SERVICE_IDENTIFIER = 0x022B
    OTP_SERVICE_LOGO = 0x022C
    OTP_SERVICE_LOGO_TYPE = 0x022D
    GOSTR3410_PARAMS = 0x0250
    GOSTR3411_PARAMS = 0x0251
    GOST28147_PARAMS = 0x0252
    HW_FEATURE_TYPE = 0x0300
    RESET_ON_INIT = 0x0301
    HAS_RESET = 0x0302
    PIXEL_X = 0x0400
    PIXEL_Y = 0x0401
    RESOLUTION = 0x0402
    CHAR_ROWS = 0x0403
    CHAR_COLUMNS = 0x0404
    COLOR = 0x0405
    BITS_PER_PIXEL = 0x0406
    CHAR_SETS = 0x0480
    ENCODING_METHODS = 0x0481
    MIME_TYPES = 0x0482
    MECHANISM_TYPE = 0x0500
    REQUIRED_CMS_ATTRIBUTES = 0x0501
    DEFAULT_CMS_ATTRIBUTES = 0x0502
    SUPPORTED_CMS_ATTRIBUTES = 0x0503
    ALLOWED_MECHANISMS = 0x0600 | ARRAY_ATTRIBUTE


class ObjectClass(enum.IntEnum):
    """Values of the CLASS attribute (CKO_*)."""

    DATA = 0x0
    CERTIFICATE = 0x1
    PUBLIC_KEY = 0x2
    PRIVATE_KEY = 0x3
    SECRET_KEY = 0x4
    HW_FEATURE = 0x5
    DOMAIN_PARAMETERS = 0x6
    MECHANISM = 0x7
    OTP_KEY = 0x8


class KeyType(enum.IntEnum):
    """Values of the KEY_TYPE attribute (CKK_*); ECDSA is another name for EC."""

    RSA = 0x000
    DSA = 0x001
    DH = 0x002
    EC = 0x003
    ECDSA = 0x003
    GENERIC_SECRET = 0x010
    DES3 = 0x015
    AES = 0x01F
    HOTP = 0x023
    MD5_HMAC = 0x027
    SHA_1_HMAC = 0x028
    SHA256_HMAC = 0x02B
    SHA384_HMAC = 0x02C
    SHA512_HMAC = 0x02D
    SHA224_HMAC = 0x02E


class CertificateType(enum.IntEnum):
    """Values of the CERTIFICATE_TYPE attribute (CKC_*)."""

    X_509 = 0x0
    X_509_ATTR_CERT = 0x1
    WTLS = 0x2


class CertificateCategory(enum.IntEnum):
    """Values of the CERTIFICATE_CATEGORY attribute."""

    UNSPECIFIED = 0
    TOKEN_USER = 1
    AUTHORITY = 2
    OTHER_ENTITY = 3


class Mechanism(enum.IntEnum):
    """Mechanism identifiers (CKM_*)."""

    RSA_PKCS_KEY_PAIR_GEN = 0x00000
    RSA_PKCS = 0x00001
    RSA_9796 = 0x00002
    RSA_X_509 = 0x00003
    MD5_RSA_PKCS = 0x00005
    SHA1_RSA_PKCS = 0x00006
    RSA_PKCS_OAEP = 0x00009
    RSA_PKCS_PSS = 0x0000D
    SHA1_RSA_PKCS_PSS = 0x0000E
    SHA256_RSA_PKCS = 0x00040
    SHA384_RSA_PKCS = 0x00041
    SHA512_RSA_PKCS = 0x00042
    SHA256_RSA_PKCS_PSS = 0x00043
    SHA384_RSA_PKCS_PSS = 0x00044
    SHA512_RSA_PKCS_PSS = 0x00045
    SHA224_RSA_PKCS = 0x00046
    SHA224_RSA_PKCS_PSS = 0x00047
    SHA512_224 = 0x00048
    SHA512_224_HMAC = 0x00049
    SHA512_224_HMAC_GENERAL = 0x0004A
    SHA512_224_KEY_DERIVATION = 0x0004B
    SHA512_256 = 0x0004C
    SHA512_256_HMAC = 0x0004D
    SHA512_256_HMAC_GENERAL = 0x0004E
    SHA512_256_KEY_DERIVATION = 0x0004F
    DES3_ECB = 0x00132
    DES3_CBC = 0x00133
    DES3_MAC = 0x00134
    DES3_MAC_GENERAL = 0x00135
    DES3_CBC_PAD = 0x00136
    DES3_CMAC_GENERAL = 0x00137
    DES3_CMAC = 0x00138
    MD5 = 0x00210
    MD5_HMAC = 0x00211
    MD5_HMAC_GENERAL = 0x00212
    SHA_1 = 0x00220
    SHA_1_HMAC = 0x00221
    SHA_1_HMAC_GENERAL = 0x00222
    SHA256 = 0x00250
    SHA256_HMAC = 0x00251
    SHA256_HMAC_GENERAL = 0x00252
    SHA224 = 0x00255
    SHA224_HMAC = 0x00256
    SHA224_HMAC_GENERAL = 0x00257
    SHA384 = 0x00260
    SHA384_HMAC = 0x00261
    SHA384_HMAC_GENERAL = 0x00262
    SHA512 = 0x00270
    SHA512_HMAC = 0x00271
    SHA512_HMAC_GENERAL = 0x00272
    HOTP_KEY_GEN = 0x00290
    HOTP = 0x00291
    GENERIC_SECRET_KEY_GEN = 0x00350
    MD5_KEY_DERIVATION = 0x00390
    MD2_KEY_DERIVATION = 0x00391
    SHA1_KEY_DERIVATION = 0x00392
    SHA256_KEY_DERIVATION = 0x00393
    SHA384_KEY_DERIVATION = 0x00394
    SHA512_KEY_DERIVATION = 0x00395
    SHA224_KEY_DERIVATION = 0x00396
    EC_KEY_PAIR_GEN = 0x01040
    ECDSA = 0x01041
    ECDSA_SHA1 = 0x01042
    ECDSA_SHA224 = 0x01043
    ECDSA_SHA256 = 0x01044
    ECDSA_SHA384 = 0x01045
    ECDSA_SHA512 = 0x01046
    ECDH1_DERIVE = 0x01050
    ECDH1_COFACTOR_DERIVE = 0x01051
    ECMQV_DERIVE = 0x01052
    ECDH_AES_KEY_WRAP = 0x01053
    RSA_AES_KEY_WRAP = 0x01054
    AES_KEY_GEN = 0x01080
    AES_ECB = 0x01081
    AES_CBC = 0x01082
    AES_MAC = 0x01083
    AES_MAC_GENERAL = 0x01084
    AES_CBC_PAD = 0x01085
    AES_CTR = 0x01086
    AES_GCM = 0x01087
    AES_CCM = 0x01088
    AES_CTS = 0x01089
    AES_CMAC = 0x0108A
    AES_CMAC_GENERAL = 0x0108B
    AES_XCBC_MAC = 0x0108C
    AES_XCBC_MAC_96 = 0x0108D
    AES_GMAC = 0x0108E
    DES3_ECB_ENCRYPT_DATA = 0x01102
    DES3_CBC_ENCRYPT_DATA = 0x01103
    AES_ECB_ENCRYPT_DATA = 0x01104
    AES_CBC_ENCRYPT_DATA = 0x01105
    AES_KEY_WRAP = 0x02109
    AES_KEY_WRAP_PAD = 0x0210A


class MgfType(enum.IntEnum):
    """Mask generation functions for RSA PSS and OAEP (CKG_*)."""

    MGF1_SHA1 = 0x0001
    MGF1_SHA256 = 0x0002
    MGF1_SHA384 = 0x0003
    MGF1_SHA512 = 0x0004
    MGF1_SHA224 = 0x0005


OAEP_SOURCE_DATA_SPECIFIED = 0x0001
"""The only OAEP encoding parameter source (CKZ_DATA_SPECIFIED)."""


def _as_id(value) -> int:
    value = int(value)
    if value < 0:
        raise ValueError(f"identifier must not be negative, got {value}")
    return value


def is_array_attribute(attr_id) -> bool:
    """Whether an attribute's value is itself an array of attributes."""
    return bool(_as_id(attr_id) & ARRAY_ATTRIBUTE)


def is_vendor_defined(value) -> bool:
    """Whether an identifier lies in the vendor-defined range."""
    return bool(_as_id(value) & VENDOR_DEFINED)