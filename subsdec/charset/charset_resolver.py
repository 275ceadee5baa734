"""
자막 원본 인코딩 결정 모듈입니다.

역할:
- 우선순위에 따라 원본 인코딩 이름을 하나로 결정
  1. 상위(디먹서)가 알려준 인코딩
  2. 설정된 인코딩 ("system"이면 플랫폼 기본 코드셋)
  3. 로케일 기본 인코딩 (기본값 CP1252)
- UTF-8이면 변환기 없이 UTF-8 직접 모드 사용
- 그 외 인코딩은 변환기를 열고, 실패하면 로그만 남기고 UTF-8 직접 모드로 대체

사용 예시:
    >>> resolver = CharsetResolver(configured_encoding="", locale_encoding="CP1252")
    >>> converter = resolver.open(declared_encoding="Shift_JIS")
    >>> converter.encoding
    'Shift_JIS'
"""

from __future__ import annotations

import locale
import logging
from dataclasses import dataclass
from typing import Optional

from subsdec.charset.converter import Converter, is_utf8_name
from subsdec.config.schema import DecoderConfig

logger = logging.getLogger(__name__)

# 설정값 "system": 플랫폼 기본 코드셋 사용
SYSTEM_ENCODING = "system"

DEFAULT_LOCALE_ENCODING = "CP1252"


@dataclass(frozen=True)
class ResolvedCharset:
    """
    결정된 원본 인코딩입니다.

    필드:
        encoding: 인코딩 이름
        source: 결정 근거 ("codec" | "declared" | "configured" | "locale")
        autodetect_utf8: UTF-8 자동 감지 사용 여부
    """
    encoding: str
    source: str
    autodetect_utf8: bool

    @property
    def is_utf8(self) -> bool:
        return is_utf8_name(self.encoding)


class CharsetResolver:
    """
    원본 인코딩을 결정하고 변환기를 여는 클래스입니다.

    UTF-8 자동 감지는 인코딩이 상위에서 확정되지 않은 경우
    (설정값 또는 로케일 기본값을 사용하는 경우)에만 켜집니다.

    파라미터:
        configured_encoding: 설정된 인코딩 ("" = 미지정, "system" = 플랫폼 기본값)
        locale_encoding: 로케일 기본 인코딩
        autodetect_utf8: UTF-8 자동 감지 설정값
    """

    def __init__(
        self,
        configured_encoding: str = "",
        locale_encoding: str = DEFAULT_LOCALE_ENCODING,
        autodetect_utf8: bool = True,
    ) -> None:
        self._configured_encoding = configured_encoding.strip()
        self._locale_encoding = locale_encoding or DEFAULT_LOCALE_ENCODING
        self._autodetect_utf8 = autodetect_utf8

    @classmethod
    def from_config(cls, decoder_config: DecoderConfig) -> "CharsetResolver":
        """DecoderConfig로부터 CharsetResolver를 생성합니다."""
        return cls(
            configured_encoding=decoder_config.encoding,
            locale_encoding=decoder_config.locale_encoding,
            autodetect_utf8=decoder_config.autodetect_utf8,
        )

    def resolve(
        self,
        declared_encoding: Optional[str] = None,
        *,
        force_utf8: bool = False,
    ) -> ResolvedCharset:
        """
        우선순위에 따라 원본 인코딩을 결정합니다.

        파라미터:
            declared_encoding: 상위에서 알려준 인코딩 (None 또는 "" = 없음)
            force_utf8: 코덱 자체가 UTF-8을 요구하는 경우 True (ITU-T T.140)

        반환값:
            ResolvedCharset: 결정된 인코딩과 UTF-8 자동 감지 여부
        """
        if force_utf8:
            return ResolvedCharset(encoding="UTF-8", source="codec", autodetect_utf8=False)

        if declared_encoding and declared_encoding.strip():
            encoding = declared_encoding.strip()
            logger.debug(f"상위에서 지정한 문자 인코딩 사용 시도: {encoding}")
            return ResolvedCharset(encoding=encoding, source="declared", autodetect_utf8=False)

        if self._configured_encoding:
            logger.debug(f"설정된 문자 인코딩 사용 시도: {self._configured_encoding}")
            if self._configured_encoding.lower() == SYSTEM_ENCODING:
                encoding = locale.getpreferredencoding(False)
            else:
                encoding = self._configured_encoding
            source = "configured"
        else:
            encoding = self._locale_encoding
            logger.debug(f"기본 문자 인코딩 사용 시도: {encoding}")
            source = "locale"

        if self._autodetect_utf8:
            logger.debug("UTF-8 자동 감지 사용")

        return ResolvedCharset(
            encoding=encoding,
            source=source,
            autodetect_utf8=self._autodetect_utf8,
        )

    def open_converter(self, resolved: ResolvedCharset) -> Converter:
        """
        결정된 인코딩으로 변환기를 엽니다.

        UTF-8이면 UTF-8 직접 모드 변환기를 반환합니다.
        변환기를 열 수 없으면 에러를 로깅하고 UTF-8 직접 모드로 대체합니다.
        """
        if resolved.is_utf8:
            return Converter.utf8_direct()

        try:
            converter = Converter(resolved.encoding, autodetect_utf8=resolved.autodetect_utf8)
        except LookupError as exc:
            logger.error(f"{resolved.encoding}에서 변환할 수 없습니다: {exc}")
            return Converter.utf8_direct()

        logger.info(
            f"자막 변환기 준비: encoding={resolved.encoding}, "
            f"source={resolved.source}, autodetect_utf8={resolved.autodetect_utf8}"
        )
        return converter

    def open(
        self,
        declared_encoding: Optional[str] = None,
        *,
        force_utf8: bool = False,
    ) -> Converter:
        """resolve()와 open_converter()를 한 번에 수행합니다."""
        return self.open_converter(self.resolve(declared_encoding, force_utf8=force_utf8))
