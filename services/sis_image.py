"""
SIS image codec

An SIS file is a 200 byte header followed by the raw frame:

    offset  length  field
    0       10      reserved (spaces)
    10      2       height, little-endian uint16
    12      2       width, little-endian uint16
    14      186     reserved (spaces)
    200     2*h*w   samples, little-endian uint16, row-major

The reserved regions are never interpreted but are always written as ASCII
spaces, which is what the acquisition software expects to find.
"""
import io
import os
import struct
import tempfile

import numpy as np

from services.errors import DimensionError, FormatError, IoError
from services.logger import app_logger

HEADER_SIZE = 200
RESERVED_HEAD = 10
RESERVED_TAIL = 186
MAX_DIMENSION = 0xFFFF
SAMPLE_DTYPE = np.dtype('<u2')
PAD_BYTE = b' '

_DIMENSIONS = struct.Struct('<HH')


def _check_dimension(name, value):
    if value > MAX_DIMENSION:
        raise DimensionError(f"{name.capitalize()} of image too big ({value} > {MAX_DIMENSION})")
    if value < 0:
        raise DimensionError(f"{name.capitalize()} of image must not be negative ({value})")


def _read_exact(stream, size, what):
    """Read exactly size bytes or fail, a short read means the file is truncated"""
    data = stream.read(size)
    if data is None or len(data) != size:
        got = 0 if data is None else len(data)
        raise FormatError(f"Truncated SIS data: expected {size} bytes of {what}, got {got}")
    return data


class SisImage:
    """
    One decoded SIS frame.
    
    The samples are held as a read-only ``(height, width)`` uint16 array, so an
    instance can be passed around without anyone changing it underneath.
    """
    
    def __init__(self, height: int, width: int, samples):
        _check_dimension('height', height)
        _check_dimension('width', width)
        
        arr = np.asarray(samples)
        if arr.size != height * width:
            raise DimensionError(
                f"Image needs {height * width} samples for {height}x{width}, got {arr.size}"
            )
        
        if arr.size and not np.can_cast(arr.dtype, np.uint16):
            if arr.dtype.kind not in "iu":
                raise TypeError(f"Samples must be unsigned 16-bit integers, got {arr.dtype}")
            if arr.min() < 0 or arr.max() > MAX_DIMENSION:
                raise ValueError(
                    f"Sample values must be in [0, {MAX_DIMENSION}], "
                    f"got [{arr.min()}, {arr.max()}]"
                )
        
        arr = np.array(arr, dtype=np.uint16).reshape(height, width)
        arr.setflags(write=False)
        
        self._height = height
        self._width = width
        self._samples = arr
    
    @classmethod
    def from_array(cls, arr) -> "SisImage":
        """Wrap a 2-D grid of uint16 values"""
        arr = np.asarray(arr)
        if arr.ndim != 2:
            raise DimensionError(f"SIS images are 2-D, got array with shape {arr.shape}")
        height, width = arr.shape
        return cls(height, width, arr)
    
    @property
    def height(self) -> int:
        return self._height
    
    @property
    def width(self) -> int:
        return self._width
    
    @property
    def shape(self):
        return (self._height, self._width)
    
    @property
    def samples(self) -> np.ndarray:
        """Read-only (height, width) uint16 view of the frame"""
        return self._samples
    
    def to_array(self) -> np.ndarray:
        """Writable copy of the frame"""
        return self._samples.copy()
    
    def __eq__(self, other):
        if not isinstance(other, SisImage):
            return NotImplemented
        return self.shape == other.shape and np.array_equal(self._samples, other._samples)
    
    def __repr__(self):
        return f"SisImage(height={self._height}, width={self._width})"
    
    # ------------------------------------------------------------------
    # Decoding
    # ------------------------------------------------------------------
    
    @classmethod
    def decode(cls, data) -> "SisImage":
        """
        Decode an SIS frame.
        
        Args:
            data: bytes-like object or a binary stream positioned at the start of the frame
            
        Raises:
            FormatError: header or pixel block is shorter than it should be
        """
        if isinstance(data, (bytes, bytearray, memoryview)):
            stream = io.BytesIO(data)
        else:
            stream = data
        
        _read_exact(stream, RESERVED_HEAD, 'leading reserved header')
        height, width = _DIMENSIONS.unpack(_read_exact(stream, _DIMENSIONS.size, 'dimensions'))
        _read_exact(stream, RESERVED_TAIL, 'trailing reserved header')
        
        nbytes = height * width * SAMPLE_DTYPE.itemsize
        pixels = _read_exact(stream, nbytes, f'pixel data for {height}x{width} image')
        samples = np.frombuffer(pixels, dtype=SAMPLE_DTYPE)
        
        return cls(height, width, samples)
    
    @classmethod
    def read(cls, path) -> "SisImage":
        """Read and decode an SIS file"""
        app_logger.debug(f"Reading sis image from {path}")
        try:
            with open(path, 'rb') as f:
                img = cls.decode(f)
        except FormatError as e:
            raise FormatError(f"{path}: {e}") from e
        except OSError as e:
            raise IoError(f"Cannot read sis image {path}: {e}") from e
        
        app_logger.debug(f"Image height: {img.height}, width: {img.width}")
        return img
    
    # ------------------------------------------------------------------
    # Encoding
    # ------------------------------------------------------------------
    
    def encode(self) -> bytes:
        """Encode to the on-disk SIS layout"""
        header = (PAD_BYTE * RESERVED_HEAD
                  + _DIMENSIONS.pack(self._height, self._width)
                  + PAD_BYTE * RESERVED_TAIL)
        return header + self._samples.astype(SAMPLE_DTYPE, copy=False).tobytes(order='C')
    
    def write(self, path) -> None:
        """
        Write the frame to path, replacing any existing file.
        
        The data goes to a temp file in the same directory first and is renamed
        into place, so readers never see a half-written frame.
        """
        app_logger.debug(f"Writing sis image to path {path}")
        data = self.encode()
        
        output_dir = os.path.dirname(os.path.abspath(path))
        temp_path = None
        try:
            fd, temp_path = tempfile.mkstemp(suffix='.tmp', dir=output_dir, prefix='.saving_')
            with os.fdopen(fd, 'wb') as f:
                f.write(data)
            os.replace(temp_path, path)
        except OSError as e:
            if temp_path and os.path.exists(temp_path):
                try:
                    os.remove(temp_path)
                except OSError:
                    pass  # Best effort cleanup
            raise IoError(f"Cannot write sis image {path}: {e}") from e
