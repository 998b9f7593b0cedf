"""Readers for COLMAP sparse reconstructions (cameras, images and 3D points).

Each reader accepts a stream opened in binary mode. Text files may also be
given as text streams.
"""

from __future__ import annotations

import enum
import math
import re
import struct
from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import IO, Callable, Optional, TypeVar, Union

__all__ = [
    "ColmapFormatError",
    "CameraModel",
    "Camera",
    "Image",
    "Point3D",
    "read_cameras",
    "read_images",
    "read_points3d",
]

T = TypeVar("T")

Vec2 = tuple[float, float]
Vec3 = tuple[float, float, float]
Quat = tuple[float, float, float, float]


class ColmapFormatError(ValueError):
    """Raised when COLMAP data is malformed or truncated."""


class CameraModel(enum.Enum):
    """COLMAP camera models, valued by their binary model id."""

    SIMPLE_PINHOLE = 0
    PINHOLE = 1
    SIMPLE_RADIAL = 2
    RADIAL = 3
    OPENCV = 4
    OPENCV_FISHEYE = 5
    FULL_OPENCV = 6
    FOV = 7
    SIMPLE_RADIAL_FISHEYE = 8
    RADIAL_FISHEYE = 9
    THIN_PRISM_FISHEYE = 10

    @classmethod
    def from_id(cls, model_id: int) -> Optional["CameraModel"]:
        """Return the model with this binary id, or None if unknown."""
        try:
            return cls(model_id)
        except ValueError:
            return None

    @classmethod
    def from_name(cls, name: str) -> Optional["CameraModel"]:
        """Return the model with this text name, or None if unknown."""
        return cls.__members__.get(name)

    def num_params(self) -> int:
        """Number of intrinsic parameters the model carries."""
        return _NUM_PARAMS[self]


_NUM_PARAMS = {
    CameraModel.SIMPLE_PINHOLE: 3,
    CameraModel.PINHOLE: 4,
    CameraModel.SIMPLE_RADIAL: 4,
    CameraModel.RADIAL: 5,
    CameraModel.OPENCV: 8,
    CameraModel.OPENCV_FISHEYE: 8,
    CameraModel.FULL_OPENCV: 12,
    CameraModel.FOV: 5,
    CameraModel.SIMPLE_RADIAL_FISHEYE: 4,
    CameraModel.RADIAL_FISHEYE: 5,
    CameraModel.THIN_PRISM_FISHEYE: 12,
}

# Models whose parameters start with a single focal length f, cx, cy.
_SINGLE_FOCAL = frozenset(
    {
        CameraModel.SIMPLE_PINHOLE,
        CameraModel.SIMPLE_RADIAL,
        CameraModel.RADIAL,
        CameraModel.SIMPLE_RADIAL_FISHEYE,
        CameraModel.RADIAL_FISHEYE,
    }
)


def _f32(value: float) -> float:
    """Round a float to single precision."""
    try:
        return struct.unpack("<f", struct.pack("<f", value))[0]
    except OverflowError:
        return math.copysign(math.inf, value)


@dataclass
class Camera:
    id: int
    model: CameraModel
    width: int
    height: int
    params: list[float] = field(default_factory=list)

    def focal(self) -> tuple[float, float]:
        """Focal lengths (fx, fy) in pixels."""
        y_index = 0 if self.model in _SINGLE_FOCAL else 1
        return self.params[0], self.params[y_index]

    def principal_point(self) -> Vec2:
        """Principal point (cx, cy) in pixels, at single precision."""
        offset = 1 if self.model in _SINGLE_FOCAL else 2
        return _f32(self.params[offset]), _f32(self.params[offset + 1])


@dataclass
class Image:
    """A registered image. ``quat`` is stored in (x, y, z, w) order."""

    tvec: Vec3
    quat: Quat
    camera_id: int
    name: str
    xys: list[Vec2] = field(default_factory=list)
    point3d_ids: list[int] = field(default_factory=list)


@dataclass
class Point3D:
    xyz: Vec3
    rgb: tuple[int, int, int]
    error: float
    image_ids: list[int] = field(default_factory=list)
    point2d_idxs: list[int] = field(default_factory=list)


# ---------------------------------------------------------------------------
# Text parsing helpers

_SIGNED_RE = re.compile(r"[+-]?[0-9]+")
_UNSIGNED_RE = re.compile(r"\+?[0-9]+")


def _parse_int(text: str, bits: int, signed: bool) -> int:
    pattern = _SIGNED_RE if signed else _UNSIGNED_RE
    if not pattern.fullmatch(text):
        raise ColmapFormatError("Parse error")
    value = int(text)
    if signed:
        low, high = -(1 << (bits - 1)), (1 << (bits - 1)) - 1
    else:
        low, high = 0, (1 << bits) - 1
    if not low <= value <= high:
        raise ColmapFormatError("Parse error")
    return value


def _i32(text: str) -> int:
    return _parse_int(text, 32, True)


def _i64(text: str) -> int:
    return _parse_int(text, 64, True)


def _u64(text: str) -> int:
    return _parse_int(text, 64, False)


def _u8(text: str) -> int:
    return _parse_int(text, 8, False)


def _f64(text: str) -> float:
    if "_" in text:
        raise ColmapFormatError("Parse error")
    try:
        return float(text)
    except ValueError:
        raise ColmapFormatError("Parse error") from None


def _f32_text(text: str) -> float:
    return _f32(_f64(text))


def _field(parts: list[str], index: int, parse: Callable[[str], T]) -> T:
    try:
        token = parts[index]
    except IndexError:
        raise ColmapFormatError("Missing field") from None
    return parse(token)


def _text_lines(reader: IO) -> Iterator[str]:
    for raw in reader:
        if isinstance(raw, bytes):
            try:
                raw = raw.decode("utf-8")
            except UnicodeDecodeError as exc:
                raise ColmapFormatError(str(exc)) from exc
        yield raw


# ---------------------------------------------------------------------------
# Binary parsing helpers


class _BinaryReader:
    def __init__(self, stream: IO[bytes]) -> None:
        self._stream = stream

    def _exact(self, size: int) -> bytes:
        data = self._stream.read(size)
        if data is None or len(data) != size:
            raise ColmapFormatError("Unexpected end of data")
        return data

    def _unpack(self, fmt: str) -> Union[int, float]:
        return struct.unpack(fmt, self._exact(struct.calcsize(fmt)))[0]

    def u8(self) -> int:
        return self._unpack("<B")

    def i32(self) -> int:
        return self._unpack("<i")

    def u64(self) -> int:
        return self._unpack("<Q")

    def f64(self) -> float:
        return self._unpack("<d")

    def f32_from_f64(self) -> float:
        return _f32(self.f64())

    def i64_be(self) -> int:
        # Point ids are read in big-endian byte order.
        return self._unpack(">q")

    def c_string(self) -> str:
        collected = bytearray()
        while True:
            byte = self._stream.read(1)
            if not byte:
                raise ColmapFormatError("Unexpected end of data")
            if byte == b"\0":
                break
            collected += byte
        try:
            return collected.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise ColmapFormatError(str(exc)) from exc


# ---------------------------------------------------------------------------
# Cameras


def _read_cameras_text(reader: IO) -> dict[int, Camera]:
    cameras: dict[int, Camera] = {}
    for line in _text_lines(reader):
        if line.startswith("#"):
            continue
        parts = line.split()
        if len(parts) < 4:
            raise ColmapFormatError("Invalid camera data")
        camera_id = _i32(parts[0])
        model = CameraModel.from_name(parts[1])
        if model is None:
            raise ColmapFormatError("Invalid camera model")
        width = _u64(parts[2])
        height = _u64(parts[3])
        params = [_f64(token) for token in parts[4:]]
        if len(params) != model.num_params():
            raise ColmapFormatError("Invalid number of camera parameters")
        cameras[camera_id] = Camera(camera_id, model, width, height, params)
    return cameras


def _read_cameras_binary(reader: IO[bytes]) -> dict[int, Camera]:
    data = _BinaryReader(reader)
    cameras: dict[int, Camera] = {}
    for _ in range(data.u64()):
        camera_id = data.i32()
        model_id = data.i32()
        width = data.u64()
        height = data.u64()
        model = CameraModel.from_id(model_id)
        if model is None:
            raise ColmapFormatError("Invalid camera model")
        params = [data.f64() for _ in range(model.num_params())]
        cameras[camera_id] = Camera(camera_id, model, width, height, params)
    return cameras


# ---------------------------------------------------------------------------
# Images


def _read_images_text(reader: IO) -> dict[int, Image]:
    images: dict[int, Image] = {}
    lines = _text_lines(reader)
    for line in lines:
        if line.startswith("#"):
            continue
        elems = line.split()
        image_id = _field(elems, 0, _i32)
        w, x, y, z = (_field(elems, i, _f32_text) for i in range(1, 5))
        tvec = tuple(_field(elems, i, _f32_text) for i in range(5, 8))
        camera_id = _field(elems, 8, _i32)
        name = _field(elems, 9, str)

        points = next(lines, "").split()
        if len(points) % 3:
            raise ColmapFormatError("Invalid image point data")
        xys: list[Vec2] = []
        point3d_ids: list[int] = []
        for px, py, pid in zip(points[0::3], points[1::3], points[2::3]):
            xys.append((_f32_text(px), _f32_text(py)))
            point3d_ids.append(_i64(pid))

        images[image_id] = Image(
            tvec=tvec,
            quat=(x, y, z, w),
            camera_id=camera_id,
            name=name,
            xys=xys,
            point3d_ids=point3d_ids,
        )
    return images


def _read_images_binary(reader: IO[bytes]) -> dict[int, Image]:
    data = _BinaryReader(reader)
    images: dict[int, Image] = {}
    for _ in range(data.u64()):
        image_id = data.i32()
        w, x, y, z = (data.f32_from_f64() for _ in range(4))
        tvec = tuple(data.f32_from_f64() for _ in range(3))
        camera_id = data.i32()
        name = data.c_string()
        xys: list[Vec2] = []
        point3d_ids: list[int] = []
        for _ in range(data.u64()):
            px = data.f32_from_f64()
            py = data.f32_from_f64()
            xys.append((px, py))
            point3d_ids.append(data.i64_be())
        images[image_id] = Image(
            tvec=tvec,
            quat=(x, y, z, w),
            camera_id=camera_id,
            name=name,
            xys=xys,
            point3d_ids=point3d_ids,
        )
    return images


# ---------------------------------------------------------------------------
# Points


def _read_points3d_text(reader: IO) -> dict[int, Point3D]:
    points: dict[int, Point3D] = {}
    for line in _text_lines(reader):
        if line.startswith("#"):
            continue
        parts = line.split()
        if len(parts) < 8:
            raise ColmapFormatError("Invalid point3D data")
        point_id = _i64(parts[0])
        xyz = (_f32_text(parts[1]), _f32_text(parts[2]), _f32_text(parts[3]))
        rgb = (_u8(parts[4]), _u8(parts[5]), _u8(parts[6]))
        error = _f64(parts[7])
        track = parts[8:]
        if len(track) % 2:
            raise ColmapFormatError("Invalid point3D track data")
        image_ids = [_i32(token) for token in track[0::2]]
        point2d_idxs = [_i32(token) for token in track[1::2]]
        points[point_id] = Point3D(xyz, rgb, error, image_ids, point2d_idxs)
    return points


def _read_points3d_binary(reader: IO[bytes]) -> dict[int, Point3D]:
    data = _BinaryReader(reader)
    points: dict[int, Point3D] = {}
    for _ in range(data.u64()):
        point_id = data.i64_be()
        xyz = tuple(data.f32_from_f64() for _ in range(3))
        rgb = (data.u8(), data.u8(), data.u8())
        error = data.f64()
        image_ids: list[int] = []
        point2d_idxs: list[int] = []
        for _ in range(data.u64()):
            image_ids.append(data.i32())
            point2d_idxs.append(data.i32())
        points[point_id] = Point3D(xyz, rgb, error, image_ids, point2d_idxs)
    return points


# ---------------------------------------------------------------------------
# Public entry points


def read_cameras(reader: IO, binary: bool) -> dict[int, Camera]:
    """Read cameras.txt / cameras.bin into a mapping of camera id to Camera."""
    return _read_cameras_binary(reader) if binary else _read_cameras_text(reader)


def read_images(reader: IO, binary: bool) -> dict[int, Image]:
    """Read images.txt / images.bin into a mapping of image id to Image."""
    return _read_images_binary(reader) if binary else _read_images_text(reader)


def read_points3d(reader: IO, binary: bool) -> dict[int, Point3D]:
    """Read points3D.txt / points3D.bin into a mapping of point id to Point3D."""
    return _read_points3d_binary(reader) if binary else _read_points3d_text(reader)