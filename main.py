"""
subsdec 커맨드라인 진입점

역할:
- 설정 로드 (config.yaml + SUBSDEC_ 환경변수 + 커맨드라인 오버라이드)
- 파일 또는 표준입력에서 자막 패킷을 읽어 SubtitleDecoder로 디코딩
- 결과를 JSON Lines 또는 텍스트로 출력
- --watch 옵션 시 설정 파일 변경을 디코더에 핫스왑

실행 예시:
    파일 하나를 패킷 하나로 디코딩:
        python main.py subtitle.txt

    파일의 각 줄을 패킷으로, Shift_JIS로 디코딩:
        python main.py --lines --encoding Shift_JIS subtitles.txt

    표준입력 스트림 디코딩 + 설정 핫스왑:
        tail -f cues.txt | python main.py --config config.yaml --watch --output text
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import BinaryIO, Iterator, Optional

from subsdec.charset import ENCODING_CHOICES
from subsdec.config.config_manager import ConfigLoadError, ConfigManager
from subsdec.config.schema import AppConfig
from subsdec.decoder import SubtitleCodec, SubtitlePacket
from subsdec.decoder.subtitle_decoder import SubtitleDecoder
from subsdec.decoder.subtitle_exporter import SubtitleExporter
from subsdec.logging import setup_logging

logger = logging.getLogger(__name__)

# 패킷에 시각 정보가 없으므로 순번 기반으로 부여하는 기본 표시 길이
DEFAULT_DURATION_MS = 2000


def _parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    """커맨드라인 인자를 파싱합니다."""
    parser = argparse.ArgumentParser(
        description="subsdec: 텍스트 자막 패킷 디코더"
    )
    parser.add_argument(
        "files", nargs="*", type=Path,
        help="디코딩할 파일 (없으면 표준입력의 각 줄을 패킷으로 사용)",
    )
    parser.add_argument(
        "--config", type=Path, default=None, help="설정 파일 경로 (없으면 기본값 사용)"
    )
    parser.add_argument(
        "--encoding", default=None, help="상위에서 지정하는 원본 인코딩 (설정보다 우선)"
    )
    parser.add_argument(
        "--codec", choices=[codec.value for codec in SubtitleCodec],
        default=SubtitleCodec.SUBT.value, help="자막 코덱 (기본: subt)",
    )
    parser.add_argument(
        "--align", type=int, choices=[0, 1, 2], help="가로 정렬 (0=center, 1=left, 2=right)"
    )
    parser.add_argument(
        "--no-autodetect-utf8", action="store_true", help="UTF-8 자동 감지 비활성화"
    )
    parser.add_argument(
        "--plain", action="store_true", help="서식 없이 텍스트만 출력 (마크업은 제거)"
    )
    parser.add_argument(
        "--lines", action="store_true", help="파일의 각 줄을 별도 패킷으로 디코딩"
    )
    parser.add_argument(
        "--duration-ms", type=int, default=DEFAULT_DURATION_MS,
        help=f"패킷당 표시 길이 (ms, 기본: {DEFAULT_DURATION_MS})",
    )
    parser.add_argument(
        "--output", choices=["json", "text"], default="json", help="출력 형식 (기본: json)"
    )
    parser.add_argument(
        "--export", type=Path, default=None, help="디코딩 결과를 저장할 JSONL 파일 경로"
    )
    parser.add_argument(
        "--watch", action="store_true", help="설정 파일 변경 시 디코더에 핫스왑"
    )
    parser.add_argument(
        "--list-encodings", action="store_true", help="지원 인코딩 목록 출력 후 종료"
    )
    return parser.parse_args(argv)


def _build_config(args: argparse.Namespace, manager: ConfigManager) -> AppConfig:
    """설정 파일을 로드하고 커맨드라인 오버라이드를 적용합니다."""
    if args.config is not None:
        config = manager.load(args.config)
    else:
        config = manager.load_defaults()

    overrides: dict = {}
    if args.align is not None:
        overrides["align"] = args.align
    if args.no_autodetect_utf8:
        overrides["autodetect_utf8"] = False
    if args.plain:
        overrides["formatted"] = False

    if not overrides:
        return config

    # 검증을 다시 거치도록 dict로 재구성
    config_dict = config.model_dump()
    config_dict["decoder"].update(overrides)
    return AppConfig(**config_dict)


def _iter_chunks(args: argparse.Namespace, stdin: BinaryIO) -> Iterator[bytes]:
    """입력 소스에서 패킷 단위 바이트를 차례로 읽습니다."""
    if not args.files:
        for line in stdin:
            chunk = line.rstrip(b"\r\n")
            if chunk:
                yield chunk
        return

    for filepath in args.files:
        data = filepath.read_bytes()
        if not args.lines:
            yield data
            continue
        for line in data.split(b"\n"):
            chunk = line.rstrip(b"\r")
            if chunk:
                yield chunk


def _iter_packets(args: argparse.Namespace, stdin: BinaryIO) -> Iterator[SubtitlePacket]:
    duration_us = max(0, args.duration_ms) * 1000
    for index, chunk in enumerate(_iter_chunks(args, stdin)):
        yield SubtitlePacket(
            data=chunk,
            pts_us=(index + 1) * max(duration_us, 1),
            length_us=duration_us,
        )


def run(
    argv: Optional[list[str]] = None,
    stdin: Optional[BinaryIO] = None,
    stdout=None,
) -> int:
    """
    CLI를 실행하고 종료 코드를 반환합니다.

    반환값:
        int: 0 = 모든 패킷 디코딩 성공, 1 = 실패한 패킷 있음, 2 = 설정 오류
    """
    args = _parse_args(argv)
    stdin = stdin if stdin is not None else sys.stdin.buffer
    stdout = stdout if stdout is not None else sys.stdout

    if args.list_encodings:
        for name, label in ENCODING_CHOICES:
            stdout.write(f"{name or '(default)':<16} {label}\n")
        return 0

    manager = ConfigManager()
    try:
        config = _build_config(args, manager)
    except ConfigLoadError as exc:
        sys.stderr.write(f"설정 로드 실패: {exc}\n")
        return 2

    setup_logging(config)
    exporter = SubtitleExporter()

    decoder = SubtitleDecoder(config, codec=args.codec, declared_encoding=args.encoding)
    if args.watch:
        if args.config is None:
            logger.warning("--watch는 --config와 함께 사용해야 합니다")
        else:
            manager.subscribe(lambda old, new: decoder.update_config(new))
            manager.watch()

    if args.export is not None:
        # 빈 파일로 시작한 뒤 패킷마다 추가
        exporter.export_jsonl([], args.export)

    try:
        with decoder:
            for packet in _iter_packets(args, stdin):
                subtitle = decoder.decode(packet)
                if subtitle is None:
                    continue
                if args.output == "json":
                    stdout.write(json.dumps(exporter.to_dict(subtitle), ensure_ascii=False))
                    stdout.write("\n")
                else:
                    stdout.write(exporter.format_text(subtitle))
                    stdout.write("\n\n")
                if args.export is not None:
                    exporter.append_jsonl([subtitle], args.export)
            stats = decoder.stats
    finally:
        manager.stop_watch()

    logger.info(
        f"디코딩 완료: decoded={stats.decoded}, dropped={stats.dropped}, "
        f"conversion_failures={stats.conversion_failures}"
    )
    return 1 if stats.conversion_failures or stats.parse_failures else 0


def main() -> None:
    sys.exit(run())


if __name__ == "__main__":
    main()
