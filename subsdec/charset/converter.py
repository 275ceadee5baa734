"""
자막 패킷 인코딩 변환 모듈입니다.

역할:
- UTF-8 직접 모드: 변환 없이 UTF-8 유효성만 검사하고, 깨진 바이트는 치환
- 변환 모드: 세션 동안 유지되는 incremental decoder로 바이트를 텍스트로 변환
- UTF-8 자동 감지: 변환기가 있어도 유효한 UTF-8 패킷은 그대로 통과시키고,
  처음으로 유효하지 않은 패킷을 만나면 자동 감지를 영구히 끔

변환 실패 사유 (패킷 단위, 재시도 없음):
- INVALID_SEQUENCE: 해당 인코딩에서 허용되지 않는 바이트 시퀀스
- INCOMPLETE_SEQUENCE: 패킷 끝에서 잘린 멀티바이트 시퀀스
- OUTPUT_EXHAUSTED: 출력이 입력 길이의 6배(UTF-8 바이트 기준)를 넘음

사용 예시:
    >>> converter = Converter("CP1252")
    >>> converter.convert(b"caf\\xe9")
    'café'
"""

from __future__ import annotations

import codecs
import enum
import logging
from typing import Optional

from subsdec.charset import ConversionError, ConversionFailure, ConverterClosedError

logger = logging.getLogger(__name__)

# 변환 결과(UTF-8 바이트)가 넘을 수 없는 입력 대비 배율
OUTPUT_EXPANSION_FACTOR = 6

UTF8_ENCODING = "UTF-8"

# NUL 바이트가 문자의 일부가 될 수 있는 코덱 (codecs 정규화 이름 접두어)
_WIDE_CODEC_PREFIXES = ("utf-16", "utf-32")


class ConverterMode(str, enum.Enum):
    """세션 시작 시 결정되는 변환 방식입니다."""
    UTF8_DIRECT = "utf8_direct"
    CONVERT = "convert"


def is_utf8_name(encoding: str) -> bool:
    """인코딩 이름이 UTF-8을 가리키는지 대소문자 구분 없이 확인합니다."""
    return encoding.strip().lower() in ("utf-8", "utf8")


class Converter:
    """
    자막 패킷 바이트를 텍스트로 바꾸는 세션 단위 변환기입니다.

    한 디코딩 세션이 변환기 하나를 단독으로 소유하며,
    세션 시작 시 한 번 열고 종료 시 한 번 닫습니다.

    파라미터:
        encoding: 원본 인코딩 이름. None이면 UTF-8 직접 모드
        autodetect_utf8: 변환 모드에서 UTF-8 자동 감지를 사용할지 여부

    에러:
        LookupError: 인코딩을 찾을 수 없거나 텍스트 인코딩이 아닐 때
    """

    def __init__(self, encoding: Optional[str] = None, autodetect_utf8: bool = False) -> None:
        self._decoder: Optional[codecs.IncrementalDecoder] = None
        self._closed = False
        self._wide = False

        if encoding is None:
            self._encoding = UTF8_ENCODING
            self._mode = ConverterMode.UTF8_DIRECT
            self._autodetect_utf8 = False
            return

        codec_info = codecs.lookup(encoding)
        # base64, rot13 같은 bytes<->bytes 변환 코덱은 사용할 수 없음
        if not getattr(codec_info, "_is_text_encoding", True):
            raise LookupError(f"'{encoding}'은(는) 텍스트 인코딩이 아닙니다")

        self._decoder = codec_info.incrementaldecoder(errors="strict")
        self._wide = codec_info.name.startswith(_WIDE_CODEC_PREFIXES)
        self._encoding = encoding
        self._mode = ConverterMode.CONVERT
        self._autodetect_utf8 = autodetect_utf8

    @classmethod
    def utf8_direct(cls) -> "Converter":
        """UTF-8 직접 모드 변환기를 생성합니다."""
        return cls(None)

    @property
    def mode(self) -> ConverterMode:
        return self._mode

    @property
    def encoding(self) -> str:
        return self._encoding

    @property
    def autodetect_utf8(self) -> bool:
        """UTF-8 자동 감지가 아직 켜져 있는지 여부입니다."""
        return self._autodetect_utf8

    @property
    def closed(self) -> bool:
        return self._closed

    def convert(self, data: bytes) -> str:
        """
        패킷 하나를 텍스트로 변환합니다.

        UTF-16/UTF-32가 아니면 첫 NUL 바이트 이후는 패킷에 포함하지 않습니다.

        파라미터:
            data: 패킷 원본 바이트

        반환값:
            str: 변환된 텍스트

        에러:
            ConversionError: 변환 모드에서 패킷을 변환할 수 없을 때
            ConverterClosedError: close() 이후 호출 시
        """
        if self._closed:
            raise ConverterClosedError(f"닫힌 변환기입니다: {self._encoding}")

        if not self._wide:
            data = _cut_at_nul(data)

        decoder = self._decoder
        if decoder is None:
            return self._validate_utf8(data)

        if self._autodetect_utf8:
            try:
                return data.decode("utf-8")
            except UnicodeDecodeError:
                logger.debug("유효하지 않은 UTF-8 시퀀스: UTF-8 자막 자동 감지를 비활성화합니다")
                self._autodetect_utf8 = False

        return self._transform(decoder, data)

    def close(self) -> None:
        """변환기를 닫습니다. 여러 번 호출해도 안전합니다."""
        if self._closed:
            return
        self._decoder = None
        self._closed = True
        logger.debug(f"변환기 닫힘: {self._encoding}")

    # =========================================================================
    # 내부 메서드
    # =========================================================================

    def _validate_utf8(self, data: bytes) -> str:
        try:
            return data.decode("utf-8")
        except UnicodeDecodeError as exc:
            logger.error(
                f"자막 인코딩 변환 실패 (UTF-8 위치 {exc.start}: {exc.reason}). "
                f"유효하지 않은 바이트를 치환하여 표시합니다. "
                f"파일을 열기 전에 문자 인코딩을 직접 지정해 보세요."
            )
            return data.decode("utf-8", errors="replace")

    def _transform(self, decoder: codecs.IncrementalDecoder, data: bytes) -> str:
        try:
            text = decoder.decode(data, final=False)
        except UnicodeDecodeError as exc:
            decoder.reset()
            raise ConversionError(
                ConversionFailure.INVALID_SEQUENCE,
                self._encoding,
                f"{self._encoding} 변환 실패: 위치 {exc.start}에서 {exc.reason}",
            ) from exc

        pending, _ = decoder.getstate()
        if pending:
            decoder.reset()
            raise ConversionError(
                ConversionFailure.INCOMPLETE_SEQUENCE,
                self._encoding,
                f"{self._encoding} 변환 실패: 패킷 끝에 불완전한 시퀀스 {len(pending)}바이트",
            )

        output_limit = OUTPUT_EXPANSION_FACTOR * len(data)
        output_size = len(text.encode("utf-8", errors="surrogatepass"))
        if output_size > output_limit:
            decoder.reset()
            raise ConversionError(
                ConversionFailure.OUTPUT_EXHAUSTED,
                self._encoding,
                f"{self._encoding} 변환 실패: 출력 {output_size}바이트가 한도 {output_limit}바이트 초과",
            )

        return text


def _cut_at_nul(data: bytes) -> bytes:
    terminator = data.find(b"\x00")
    return data if terminator == -1 else data[:terminator]
