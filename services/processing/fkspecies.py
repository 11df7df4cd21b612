"""
FKSpecies processor - optical density from three absorption images

The camera stacks two independent exposure pairs vertically in one frame.
Each acquisition produces three raw files:

    rawimg-0001   atoms present, first probe
    rawimg-0002   atoms present, second probe
    rawimg-0003   reference (dark) frame

The reference is subtracted from both probe frames, each result is
log-transformed, and within each frame the top half is subtracted from the
bottom half. The first frame's difference fills the top half of the output and
the second frame's fills the bottom half. The map is rescaled by
(od + 1) * 1000 and stored as a new SIS file next to copies of the raw frames.
"""
from pathlib import Path
from typing import Sequence

import numpy as np

from .interface import PathLike, Processor, as_paths
from ..errors import DimensionError, PatternNotFoundError
from ..logger import app_logger
from ..sis_image import SisImage

RAW_IMAGE_PATTERNS = ("rawimg-0001", "rawimg-0002", "rawimg-0003")

# Written on every batch, replacing the previous result
OD_OUTPUT_NAME = "20140000-img-0000.sis"

OD_OFFSET = 1.0
OD_SCALE = 1000.0

UINT16_MAX = np.iinfo(np.uint16).max


def find_pattern(paths: Sequence[PathLike], pattern: str) -> Path:
    """
    First path whose string form contains pattern.
    
    Raises:
        PatternNotFoundError: no path matches
    """
    app_logger.debug(f"Finding pattern {pattern} in {[str(p) for p in paths]}")
    for path in paths:
        if pattern in str(path):
            return Path(path)
    raise PatternNotFoundError(pattern, paths)


def calc_od(img1: np.ndarray, img2: np.ndarray, img3: np.ndarray) -> np.ndarray:
    """
    Optical density map from two probe frames and a reference frame.
    
    Args:
        img1: First probe frame (atoms present)
        img2: Second probe frame (atoms present)
        img3: Reference frame, subtracted from both probes
        
    Returns:
        float32 array with the shape of the inputs. Pixels where a probe is
        not brighter than the reference give -inf or NaN, which are left in place.
        
    Raises:
        DimensionError: frames differ in shape, or the height is odd
    """
    if not (img1.shape == img2.shape == img3.shape):
        raise DimensionError(
            f"Image shapes do not match: {img1.shape}, {img2.shape}, {img3.shape}"
        )
    if img1.ndim != 2:
        raise DimensionError(f"Expected 2-D frames, got shape {img1.shape}")
    
    height = img1.shape[0]
    app_logger.debug(f"Calculating OD from images. Image height {height} px")
    if height % 2:
        raise DimensionError(
            f"Image height {height} is odd, top and bottom halves cannot be subtracted"
        )
    half = height // 2
    
    # subtract offset
    img1s = img1.astype(np.float32) - img3.astype(np.float32)
    img2s = img2.astype(np.float32) - img3.astype(np.float32)
    
    output = np.zeros(img1.shape, dtype=np.float32)
    
    with np.errstate(divide='ignore', invalid='ignore'):
        img1s = np.log(img1s)
        img2s = np.log(img2s)
        output[:half] = img1s[half:] - img1s[:half]
        output[half:] = img2s[half:] - img2s[:half]
    
    return output


def to_uint16(values: np.ndarray) -> np.ndarray:
    """
    Cast floats to uint16 by truncating toward zero.
    
    Out of range values saturate at 0 and 65535, NaN becomes 0. This is the
    cast the acquisition pipeline has always applied to stored OD maps.
    """
    with np.errstate(invalid='ignore'):
        truncated = np.trunc(np.asarray(values, dtype=np.float64))
    truncated = np.nan_to_num(truncated, nan=0.0, posinf=UINT16_MAX, neginf=0.0)
    return np.clip(truncated, 0, UINT16_MAX).astype(np.uint16)


class FKSpeciesProcessor(Processor):
    """Writes an optical density image for each set of three raw frames"""
    
    name = "fkspecies"
    
    def process(self, paths: Sequence[PathLike]) -> None:
        paths = as_paths(paths)
        
        raw_paths = [find_pattern(paths, pattern) for pattern in RAW_IMAGE_PATTERNS]
        raw_outputs = [self.output_path_for(p) for p in raw_paths]
        for i, (src, dst) in enumerate(zip(raw_paths, raw_outputs), start=1):
            app_logger.debug(f"Image {i}: {src} will output to: {dst}")
        
        img1, img2, img3 = (SisImage.read(p).samples for p in raw_paths)
        
        imgod = (calc_od(img1, img2, img3) + OD_OFFSET) * OD_SCALE
        result = SisImage.from_array(to_uint16(imgod))
        
        app_logger.debug("Copying raw images to their respective output paths")
        for src in raw_paths:
            self.copy_to_output(src)
        
        od_path = self.outpath / OD_OUTPUT_NAME
        app_logger.debug(f"Writing OD image to {od_path}")
        result.write(od_path)
        app_logger.info(f"Wrote OD image {od_path}")
