"""
텍스트 자막 디코더 모듈입니다.

역할:
- 세션 시작 시 원본 인코딩을 결정하고 변환기를 한 번 엶
- SubtitlePacket을 검증 → 인코딩 변환 → 마크업 파싱하여 DecodedSubtitle 생성
- 실패는 패킷 단위로 격리: 해당 패킷만 버리고 에러를 로깅
- 정렬/서식 설정 핫스왑 지원

사용 예시:
    >>> with SubtitleDecoder(config, declared_encoding="CP949") as decoder:
    ...     subtitle = decoder.decode(SubtitlePacket(data=raw, pts_us=1_000_000))
    ...     if subtitle is not None:
    ...         print(subtitle.text)
"""

from __future__ import annotations

import logging
import threading
from typing import Optional

from subsdec.charset import ConversionError
from subsdec.charset.charset_resolver import CharsetResolver
from subsdec.charset.converter import Converter
from subsdec.config.schema import AppConfig, DecoderConfig
from subsdec.decoder import (
    DecodedSubtitle,
    DecoderStats,
    SubtitleCodec,
    SubtitlePacket,
    UnsupportedCodecError,
)
from subsdec.text import Alignment, MarkupParseError, ParseOutcome, TextSegment
from subsdec.text.markup_parser import ColorLookup, MarkupParser

logger = logging.getLogger(__name__)


class SubtitleDecoder:
    """
    텍스트 자막 스트림 하나를 디코딩하는 세션 클래스입니다.

    패킷은 한 번에 하나씩 끝까지 처리됩니다.
    설정 핫스왑(update_config)은 watchdog 스레드에서 호출될 수 있으므로
    decode()와 update_config()는 _lock으로 직렬화합니다.

    파라미터:
        config: 전체 애플리케이션 설정
        codec: 자막 코덱 ("subt" | "itu-t140")
        declared_encoding: 상위(디먹서)가 알려준 인코딩 (없으면 None)
        color_lookup: 색상 이름 변환 함수 (기본: HTML 색상 테이블)

    에러:
        UnsupportedCodecError: 지원하지 않는 코덱일 때
    """

    def __init__(
        self,
        config: AppConfig,
        codec: SubtitleCodec | str = SubtitleCodec.SUBT,
        declared_encoding: Optional[str] = None,
        color_lookup: Optional[ColorLookup] = None,
    ) -> None:
        try:
            self._codec = SubtitleCodec(codec)
        except ValueError as exc:
            raise UnsupportedCodecError(f"지원하지 않는 자막 코덱입니다: {codec}") from exc

        self._decoder_cfg: DecoderConfig = config.decoder
        self._lock = threading.RLock()
        self._stats = DecoderStats()
        self._parser = MarkupParser(color_lookup)

        resolver = CharsetResolver.from_config(self._decoder_cfg)
        self._converter: Converter = resolver.open(
            declared_encoding,
            force_utf8=self._codec is SubtitleCodec.ITU_T140,
        )

        logger.info(
            f"SubtitleDecoder 초기화: "
            f"codec={self._codec.value}, "
            f"encoding={self._converter.encoding}, "
            f"mode={self._converter.mode.value}, "
            f"align={self._decoder_cfg.align}, "
            f"formatted={self._decoder_cfg.formatted}"
        )

    def __enter__(self) -> "SubtitleDecoder":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    # =========================================================================
    # 공개 인터페이스
    # =========================================================================

    @property
    def codec(self) -> SubtitleCodec:
        return self._codec

    @property
    def converter(self) -> Converter:
        return self._converter

    @property
    def stats(self) -> DecoderStats:
        """누적 통계의 복사본을 반환합니다."""
        with self._lock:
            return DecoderStats(**vars(self._stats))

    @property
    def default_alignment(self) -> Alignment:
        """{\\anN}이 없을 때의 정렬 값 (하단 + 설정된 가로 정렬)입니다."""
        return Alignment.BOTTOM | Alignment(self._decoder_cfg.align)

    def decode(self, packet: SubtitlePacket) -> Optional[DecodedSubtitle]:
        """
        자막 패킷 하나를 디코딩합니다.

        다음 경우 패킷을 버리고 None을 반환합니다:
        - 불연속/손상 플래그가 있는 패킷
        - 표시 시각이 없는 패킷
        - 데이터가 비어 있는 패킷
        - 인코딩 변환 실패
        - 파싱 실패

        파라미터:
            packet: 디코딩할 SubtitlePacket

        반환값:
            Optional[DecodedSubtitle]: 디코딩 결과 (버린 경우 None)
        """
        with self._lock:
            if packet.discontinuity or packet.corrupted:
                logger.debug(
                    f"불연속/손상 패킷 무시: discontinuity={packet.discontinuity}, "
                    f"corrupted={packet.corrupted}"
                )
                return self._drop()

            if packet.pts_us is None or packet.pts_us <= 0:
                logger.warning("표시 시각이 없는 자막입니다")
                return self._drop()

            if len(packet.data) < 1:
                logger.warning("자막 데이터가 없습니다")
                return self._drop()

            try:
                text = self._converter.convert(packet.data)
            except ConversionError as exc:
                logger.error(
                    f"자막 인코딩 변환 실패 ({exc.reason.value}): {exc}. "
                    f"파일을 열기 전에 문자 인코딩을 직접 지정해 보세요.",
                    extra={"pts_us": packet.pts_us, "encoding": exc.encoding},
                )
                self._stats.conversion_failures += 1
                return self._drop()

            try:
                outcome = self._parser.parse(text, self.default_alignment)
            except MarkupParseError as exc:
                logger.error(f"자막 파싱 실패: {exc}", extra={"pts_us": packet.pts_us})
                self._stats.parse_failures += 1
                return self._drop()

            segments = outcome.segments
            if not self._decoder_cfg.formatted:
                segments = _flatten(outcome)

            self._stats.decoded += 1
            return DecodedSubtitle(
                start_us=packet.pts_us,
                stop_us=packet.pts_us + packet.length_us,
                ephemeral=packet.length_us == 0,
                align=outcome.align,
                segments=segments,
            )

    def update_config(self, config: AppConfig) -> None:
        """
        설정을 핫스왑으로 업데이트합니다.

        정렬(align)과 서식(formatted)은 다음 패킷부터 즉시 적용됩니다.
        인코딩 관련 설정은 세션을 새로 열어야 적용됩니다.

        파라미터:
            config (AppConfig): 새 설정 객체
        """
        new_cfg = config.decoder
        with self._lock:
            old_cfg = self._decoder_cfg
            self._decoder_cfg = new_cfg

        if (
            new_cfg.encoding != old_cfg.encoding
            or new_cfg.locale_encoding != old_cfg.locale_encoding
            or new_cfg.autodetect_utf8 != old_cfg.autodetect_utf8
        ):
            logger.warning("인코딩 설정 변경은 새 디코더 세션부터 적용됩니다")

        logger.info(
            f"SubtitleDecoder 설정 핫스왑: "
            f"align={new_cfg.align}, formatted={new_cfg.formatted}"
        )

    def close(self) -> None:
        """세션을 종료하고 변환기를 닫습니다."""
        with self._lock:
            if self._converter.closed:
                return
            self._converter.close()
        logger.info(
            f"SubtitleDecoder 종료: decoded={self._stats.decoded}, "
            f"dropped={self._stats.dropped}, "
            f"conversion_failures={self._stats.conversion_failures}"
        )

    # =========================================================================
    # 내부 메서드
    # =========================================================================

    def _drop(self) -> None:
        self._stats.dropped += 1
        return None


def _flatten(outcome: ParseOutcome) -> list[TextSegment]:
    # 서식 비활성화: 마크업은 제거된 상태 그대로, 스타일만 기본값
    return [TextSegment(outcome.text)]
