"""
자막 디코더 모듈 패키지

공통 데이터 타입:
- SubtitleCodec: 디코더가 지원하는 텍스트 자막 코덱
- SubtitlePacket: 디코더 입력 패킷 (원본 바이트 + 타임스탬프)
- DecodedSubtitle: 디코딩 결과 (표시 구간 + 정렬 + 세그먼트)
- DecoderStats: 세션 누적 처리 통계
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Optional

from subsdec.text import Alignment, TextSegment


class SubtitleCodec(str, enum.Enum):
    """디코더가 처리하는 텍스트 자막 코덱입니다."""
    # 일반 텍스트 자막 (SRT, SUB 등)
    SUBT = "subt"
    # ITU-T T.140 실시간 텍스트 (항상 UTF-8)
    ITU_T140 = "itu-t140"


@dataclass
class SubtitlePacket:
    """
    디코더에 전달되는 자막 패킷입니다.

    필드:
        data: 패킷 원본 바이트 (종료 문자 없음)
        pts_us: 표시 시작 시각 (마이크로초). None 또는 0 이하면 시각 없음
        length_us: 표시 길이 (마이크로초). 0이면 다음 자막까지 표시
        discontinuity: 스트림 불연속 플래그
        corrupted: 손상 플래그
    """
    data: bytes
    pts_us: Optional[int]
    length_us: int = 0
    discontinuity: bool = False
    corrupted: bool = False


@dataclass
class DecodedSubtitle:
    """
    렌더러에 전달할 디코딩 결과입니다.

    필드:
        start_us: 표시 시작 시각 (마이크로초)
        stop_us: 표시 종료 시각 (start_us + length_us)
        ephemeral: True이면 다음 자막이 올 때까지 표시
        align: 정렬 비트마스크
        segments: 스타일 세그먼트 목록 (최소 1개)
    """
    start_us: int
    stop_us: int
    ephemeral: bool
    align: Alignment
    segments: list[TextSegment] = field(default_factory=list)

    @property
    def text(self) -> str:
        """스타일 정보를 제외한 전체 텍스트입니다."""
        return "".join(segment.text for segment in self.segments)


@dataclass
class DecoderStats:
    """디코딩 세션 누적 통계입니다."""
    decoded: int = 0
    dropped: int = 0
    conversion_failures: int = 0
    parse_failures: int = 0


class DecoderError(Exception):
    """디코더 설정 중 발생하는 에러의 기본 클래스입니다."""
    pass


class UnsupportedCodecError(DecoderError):
    """지원하지 않는 코덱으로 디코더를 열려고 할 때 발생하는 에러입니다."""
    pass
