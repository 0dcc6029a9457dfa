"""
Typed configuration models matching the YAML config structure.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass
class DetectorConfig:
    """Detector backend configuration."""
    backend: str = "auto"
    input_size: Optional[List[int]] = None
    conf_threshold: float = 0.25
    iou_threshold: float = 0.45
    class_name_overrides: Optional[Dict[int, str]] = None

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "DetectorConfig":
        return cls(
            backend=d.get("backend", "auto"),
            input_size=d.get("input_size"),
            conf_threshold=d.get("conf_threshold", 0.25),
            iou_threshold=d.get("iou_threshold", 0.45),
            class_name_overrides=d.get("class_name_overrides"),
        )

    def to_dict(self) -> Dict[str, Any]:
        d: Dict[str, Any] = {
            "backend": self.backend,
            "conf_threshold": self.conf_threshold,
            "iou_threshold": self.iou_threshold,
        }
        if self.input_size is not None:
            d["input_size"] = self.input_size
        if self.class_name_overrides is not None:
            d["class_name_overrides"] = self.class_name_overrides
        return d


@dataclass
class SourceConfig:
    """Frame source configuration."""
    source_id: str = "main"
    camera_api: str = "v4l2"
    default_fps: float = 30.0

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "SourceConfig":
        return cls(
            source_id=d.get("source_id", "main"),
            camera_api=d.get("camera_api", "v4l2"),
            default_fps=float(d.get("default_fps", 30.0)),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "source_id": self.source_id,
            "camera_api": self.camera_api,
            "default_fps": self.default_fps,
        }


@dataclass
class OutputConfig:
    """Annotated video output configuration."""
    path: str = "output.mp4"
    fourcc: str = "H264"

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "OutputConfig":
        return cls(
            path=d.get("path", "output.mp4"),
            fourcc=d.get("fourcc", "H264"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {"path": self.path, "fourcc": self.fourcc}


@dataclass
class AnnotationConfig:
    """Overlay colors (BGR), font scales and line thicknesses."""
    box_color: List[int] = field(default_factory=lambda: [255, 0, 0])
    box_thickness: int = 3
    label_color: List[int] = field(default_factory=lambda: [0, 255, 0])
    label_scale: float = 0.8
    label_thickness: int = 2
    label_offset: int = 10
    overlay_color: List[int] = field(default_factory=lambda: [0, 0, 255])
    overlay_scale: float = 1.2
    overlay_thickness: int = 3
    overlay_anchor: List[int] = field(default_factory=lambda: [10, 40])

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "AnnotationConfig":
        defaults = cls()
        return cls(
            box_color=d.get("box_color", defaults.box_color),
            box_thickness=d.get("box_thickness", defaults.box_thickness),
            label_color=d.get("label_color", defaults.label_color),
            label_scale=d.get("label_scale", defaults.label_scale),
            label_thickness=d.get("label_thickness", defaults.label_thickness),
            label_offset=d.get("label_offset", defaults.label_offset),
            overlay_color=d.get("overlay_color", defaults.overlay_color),
            overlay_scale=d.get("overlay_scale", defaults.overlay_scale),
            overlay_thickness=d.get("overlay_thickness", defaults.overlay_thickness),
            overlay_anchor=d.get("overlay_anchor", defaults.overlay_anchor),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "box_color": self.box_color,
            "box_thickness": self.box_thickness,
            "label_color": self.label_color,
            "label_scale": self.label_scale,
            "label_thickness": self.label_thickness,
            "label_offset": self.label_offset,
            "overlay_color": self.overlay_color,
            "overlay_scale": self.overlay_scale,
            "overlay_thickness": self.overlay_thickness,
            "overlay_anchor": self.overlay_anchor,
        }


@dataclass
class AppConfig:
    """
    Complete application configuration.

    This is a typed representation of the YAML config structure.
    """
    detector: DetectorConfig = field(default_factory=DetectorConfig)
    source: SourceConfig = field(default_factory=SourceConfig)
    output: OutputConfig = field(default_factory=OutputConfig)
    annotation: AnnotationConfig = field(default_factory=AnnotationConfig)
    log_level: str = "INFO"
    log_path: Optional[str] = None

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "AppConfig":
        """Adapter: Create AppConfig from raw dictionary (e.g., from load_config)."""
        return cls(
            detector=DetectorConfig.from_dict(d.get("detector") or {}),
            source=SourceConfig.from_dict(d.get("source") or {}),
            output=OutputConfig.from_dict(d.get("output") or {}),
            annotation=AnnotationConfig.from_dict(d.get("annotation") or {}),
            log_level=d.get("log_level", "INFO"),
            log_path=d.get("log_path"),
        )

    def to_dict(self) -> Dict[str, Any]:
        d: Dict[str, Any] = {
            "detector": self.detector.to_dict(),
            "source": self.source.to_dict(),
            "output": self.output.to_dict(),
            "annotation": self.annotation.to_dict(),
            "log_level": self.log_level,
        }
        if self.log_path is not None:
            d["log_path"] = self.log_path
        return d
