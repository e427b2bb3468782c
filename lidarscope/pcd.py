"""Reading and writing point clouds in the PCD file format."""

from __future__ import annotations

import logging
import os
import struct
from dataclasses import dataclass
from itertools import chain
from pathlib import Path
from typing import Sequence, Union

from .pointcloud import Point, PointCloud

logger = logging.getLogger(__name__)

PathLike = Union[str, "os.PathLike[str]"]

_STRUCT_CODES = {
    ("F", 4): "f",
    ("F", 8): "d",
    ("I", 1): "b",
    ("I", 2): "h",
    ("I", 4): "i",
    ("I", 8): "q",
    ("U", 1): "B",
    ("U", 2): "H",
    ("U", 4): "I",
    ("U", 8): "Q",
}


class PcdError(Exception):
    """Raised when a PCD file cannot be read or is malformed."""


@dataclass
class _Header:
    fields: list[str]
    sizes: list[int]
    types: list[str]
    counts: list[int]
    points: int
    data: str

    @property
    def codes(self) -> list[str]:
        try:
            return [_STRUCT_CODES[(t, s)] for t, s in zip(self.types, self.sizes)]
        except KeyError as exc:
            raise PcdError(f"unsupported field type/size {exc.args[0]}") from None

    @property
    def offsets(self) -> dict[str, int]:
        """Position of each field's first value within a flattened point record."""
        offsets: dict[str, int] = {}
        position = 0
        for name, count in zip(self.fields, self.counts):
            offsets.setdefault(name, position)
            position += count
        return offsets


def _ints(values: Sequence[str], key: str) -> list[int]:
    try:
        return [int(v) for v in values]
    except ValueError:
        raise PcdError(f"invalid {key} line: {' '.join(values)}") from None


def _read_header(raw: bytes) -> tuple[_Header, int]:
    entries: dict[str, list[str]] = {}
    pos = 0
    while True:
        end = raw.find(b"\n", pos)
        if end == -1:
            end = len(raw)
        line = raw[pos:end].decode("ascii", errors="replace").strip()
        pos = min(end + 1, len(raw))
        if line and not line.startswith("#"):
            key, *values = line.split()
            entries[key.upper()] = values
            if key.upper() == "DATA":
                break
        if end >= len(raw):
            raise PcdError("PCD header has no DATA line")

    fields = entries.get("FIELDS")
    if not fields:
        raise PcdError("PCD header has no FIELDS line")
    n = len(fields)
    sizes = _ints(entries.get("SIZE", ["4"] * n), "SIZE")
    types = [t.upper() for t in entries.get("TYPE", ["F"] * n)]
    counts = _ints(entries.get("COUNT", ["1"] * n), "COUNT")
    if not (len(sizes) == len(types) == len(counts) == n):
        raise PcdError("FIELDS, SIZE, TYPE and COUNT lines disagree in length")

    if "POINTS" in entries:
        points = _ints(entries["POINTS"], "POINTS")[0]
    elif "WIDTH" in entries:
        width = _ints(entries["WIDTH"], "WIDTH")[0]
        height = _ints(entries.get("HEIGHT", ["1"]), "HEIGHT")[0]
        points = width * height
    else:
        raise PcdError("PCD header has neither POINTS nor WIDTH")
    if points < 0:
        raise PcdError("negative point count")

    data = entries["DATA"][0].lower() if entries["DATA"] else ""
    return _Header(fields, sizes, types, counts, points, data), pos


def _lzf_decompress(data: bytes, expected: int) -> bytes:
    out = bytearray()
    i, n = 0, len(data)
    while i < n:
        ctrl = data[i]
        i += 1
        if ctrl < 32:
            length = ctrl + 1
            if i + length > n:
                raise PcdError("truncated LZF literal run")
            out += data[i : i + length]
            i += length
        else:
            length = ctrl >> 5
            ref = len(out) - ((ctrl & 0x1F) << 8) - 1
            if length == 7:
                if i >= n:
                    raise PcdError("truncated LZF back reference")
                length += data[i]
                i += 1
            if i >= n:
                raise PcdError("truncated LZF back reference")
            ref -= data[i]
            i += 1
            if ref < 0:
                raise PcdError("invalid LZF back reference")
            for _ in range(length + 2):
                out.append(out[ref])
                ref += 1
        if len(out) > expected:
            raise PcdError("LZF data decompresses past the declared size")
    return bytes(out)


def _ascii_rows(header: _Header, body: bytes) -> list[tuple[float, ...]]:
    width = sum(header.counts)
    rows = []
    lines = (line for line in body.decode("ascii", errors="replace").splitlines() if line.strip())
    for line in lines:
        if len(rows) == header.points:
            break
        tokens = line.split()
        if len(tokens) < width:
            raise PcdError(f"point line has {len(tokens)} values, expected {width}")
        try:
            rows.append(tuple(float(t) for t in tokens[:width]))
        except ValueError:
            raise PcdError(f"invalid number in point line: {line!r}") from None
    if len(rows) < header.points:
        raise PcdError(f"expected {header.points} points, found {len(rows)}")
    return rows


def _binary_rows(header: _Header, body: bytes) -> list[tuple]:
    record = struct.Struct("<" + "".join(c * n for c, n in zip(header.codes, header.counts)))
    need = header.points * record.size
    if len(body) < need:
        raise PcdError(f"binary data holds {len(body)} bytes, expected {need}")
    return list(record.iter_unpack(body[:need]))


def _compressed_rows(header: _Header, body: bytes) -> list[tuple]:
    if len(body) < 8:
        raise PcdError("binary_compressed data is missing its size header")
    compressed_size, uncompressed_size = struct.unpack_from("<II", body)
    payload = body[8 : 8 + compressed_size]
    if len(payload) < compressed_size:
        raise PcdError("binary_compressed data is truncated")
    raw = _lzf_decompress(payload, uncompressed_size)
    if len(raw) != uncompressed_size:
        raise PcdError("binary_compressed data has the wrong decompressed size")

    columns = []
    offset = 0
    for code, size, count in zip(header.codes, header.sizes, header.counts):
        block = header.points * size * count
        if offset + block > len(raw):
            raise PcdError("binary_compressed data is too short for the declared points")
        columns.append(list(struct.iter_unpack("<" + code * count, raw[offset : offset + block])))
        offset += block
    return [tuple(chain.from_iterable(parts)) for parts in zip(*columns)]


def load_pcd(path: PathLike) -> PointCloud:
    """Read a PCD file (ascii, binary or binary_compressed) into a point cloud."""
    try:
        raw = Path(path).read_bytes()
    except OSError as exc:
        raise PcdError(f"couldn't read file {path}: {exc}") from exc

    header, start = _read_header(raw)
    body = raw[start:]
    if header.data == "ascii":
        rows = _ascii_rows(header, body)
    elif header.data == "binary":
        rows = _binary_rows(header, body)
    elif header.data == "binary_compressed":
        rows = _compressed_rows(header, body)
    else:
        raise PcdError(f"unsupported DATA type {header.data!r}")

    offsets = header.offsets

    def value(row: tuple, name: str) -> float:
        return float(row[offsets[name]]) if name in offsets else 0.0

    points = [
        Point(value(r, "x"), value(r, "y"), value(r, "z"), value(r, "intensity")) for r in rows
    ]
    return PointCloud(points, with_intensity="intensity" in offsets)


def save_pcd(cloud: PointCloud, path: PathLike) -> None:
    """Write ``cloud`` to ``path`` as an ASCII PCD file."""
    fields = ["x", "y", "z"] + (["intensity"] if cloud.with_intensity else [])
    n = len(fields)
    count = len(cloud)
    lines = [
        "# .PCD v0.7 - Point Cloud Data file format",
        "VERSION 0.7",
        "FIELDS " + " ".join(fields),
        "SIZE " + " ".join(["4"] * n),
        "TYPE " + " ".join(["F"] * n),
        "COUNT " + " ".join(["1"] * n),
        f"WIDTH {count}",
        "HEIGHT 1",
        "VIEWPOINT 0 0 0 1 0 0 0",
        f"POINTS {count}",
        "DATA ascii",
    ]
    for p in cloud:
        values = [p.x, p.y, p.z] + ([p.intensity] if cloud.with_intensity else [])
        lines.append(" ".join(repr(float(v)) for v in values))
    Path(path).write_text("\n".join(lines) + "\n", encoding="ascii")
    logger.info("Saved %d data points to %s", count, path)


def stream_pcd(directory: PathLike) -> list[Path]:
    """Return the entries of ``directory`` sorted so playback is chronological."""
    return sorted(Path(directory).iterdir())