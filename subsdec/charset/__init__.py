"""
문자 인코딩 처리 패키지

공통 데이터 타입:
- ConversionFailure: 패킷 변환 실패 사유
- CharsetError / ConversionError / ConverterClosedError: 인코딩 관련 에러
- ENCODING_CHOICES: 설정에서 고를 수 있는 자막 인코딩 목록 (이름, 설명)
"""

from __future__ import annotations

import enum


class ConversionFailure(str, enum.Enum):
    """패킷 하나의 인코딩 변환이 중단된 사유입니다."""
    INVALID_SEQUENCE = "invalid_sequence"
    INCOMPLETE_SEQUENCE = "incomplete_sequence"
    OUTPUT_EXHAUSTED = "output_exhausted"


class CharsetError(Exception):
    """문자 인코딩 처리 중 발생하는 에러의 기본 클래스입니다."""
    pass


class ConversionError(CharsetError):
    """
    패킷 하나를 UTF-8 텍스트로 변환하지 못했을 때 발생하는 에러입니다.

    해당 패킷만 버려지며, 다음 패킷 처리에는 영향이 없습니다.
    """

    def __init__(self, reason: ConversionFailure, encoding: str, message: str) -> None:
        super().__init__(message)
        self.reason = reason
        self.encoding = encoding


class ConverterClosedError(CharsetError):
    """닫힌 변환기를 사용하려 할 때 발생하는 에러입니다."""
    pass


# 설정 UI에 제공하는 인코딩 목록: (인코딩 이름, 설명)
# "" 는 로케일 기본값, "system" 은 플랫폼 기본 코드셋을 의미합니다.
ENCODING_CHOICES: tuple[tuple[str, str], ...] = (
    ("", "Default (Windows-1252)"),
    ("system", "System codeset"),
    ("UTF-8", "Universal (UTF-8)"),
    ("UTF-16", "Universal (UTF-16)"),
    ("UTF-16BE", "Universal (big endian UTF-16)"),
    ("UTF-16LE", "Universal (little endian UTF-16)"),
    ("GB18030", "Universal, Chinese (GB18030)"),
    ("ISO-8859-15", "Western European (Latin-9)"),
    ("Windows-1252", "Western European (Windows-1252)"),
    ("IBM850", "Western European (IBM 00850)"),
    ("ISO-8859-2", "Eastern European (Latin-2)"),
    ("Windows-1250", "Eastern European (Windows-1250)"),
    ("ISO-8859-3", "Esperanto (Latin-3)"),
    ("ISO-8859-10", "Nordic (Latin-6)"),
    ("Windows-1251", "Cyrillic (Windows-1251)"),
    ("KOI8-R", "Russian (KOI8-R)"),
    ("KOI8-U", "Ukrainian (KOI8-U)"),
    ("ISO-8859-6", "Arabic (ISO 8859-6)"),
    ("Windows-1256", "Arabic (Windows-1256)"),
    ("ISO-8859-7", "Greek (ISO 8859-7)"),
    ("Windows-1253", "Greek (Windows-1253)"),
    ("ISO-8859-8", "Hebrew (ISO 8859-8)"),
    ("Windows-1255", "Hebrew (Windows-1255)"),
    ("ISO-8859-9", "Turkish (ISO 8859-9)"),
    ("Windows-1254", "Turkish (Windows-1254)"),
    ("ISO-8859-11", "Thai (TIS 620-2533/ISO 8859-11)"),
    ("Windows-874", "Thai (Windows-874)"),
    ("ISO-8859-13", "Baltic (Latin-7)"),
    ("Windows-1257", "Baltic (Windows-1257)"),
    ("ISO-8859-14", "Celtic (Latin-8)"),
    ("ISO-8859-16", "South-Eastern European (Latin-10)"),
    ("ISO-2022-CN-EXT", "Simplified Chinese (ISO-2022-CN-EXT)"),
    ("EUC-CN", "Simplified Chinese Unix (EUC-CN)"),
    ("ISO-2022-JP-2", "Japanese (7-bits JIS/ISO-2022-JP-2)"),
    ("EUC-JP", "Japanese Unix (EUC-JP)"),
    ("Shift_JIS", "Japanese (Shift JIS)"),
    ("CP949", "Korean (EUC-KR/CP949)"),
    ("ISO-2022-KR", "Korean (ISO-2022-KR)"),
    ("Big5", "Traditional Chinese (Big5)"),
    ("ISO-2022-TW", "Traditional Chinese Unix (EUC-TW)"),
    ("Big5-HKSCS", "Hong-Kong Supplementary (HKSCS)"),
    ("VISCII", "Vietnamese (VISCII)"),
    ("Windows-1258", "Vietnamese (Windows-1258)"),
)
