"""数据模型与参数构建测试。"""

from pathlib import Path

import pytest

from py_image_crop_mcp.engine.config import ConfigBuilder
from py_image_crop_mcp.exceptions import ErrorHandler, ProcessingError, ValidationError
from py_image_crop_mcp.models import (
    BatchResult,
    BatchState,
    BatchStatusEvent,
    BudgetTarget,
    CropResult,
    EncodedArtifact,
    ManualTarget,
)
from py_image_crop_mcp.utils.naming_helpers import FileNamingStrategy, PathResolver


def make_artifact(size: int = 100) -> EncodedArtifact:
    return EncodedArtifact.from_bytes(b"x" * size, width=30, height=20, quality=0.5, scale=1.0)


class TestEncodedArtifact:
    """编码产物测试"""

    def test_release_is_idempotent(self):
        artifact = make_artifact()

        assert artifact.release() is True
        assert artifact.release() is False
        assert artifact.released
        assert artifact.size_bytes == 0

    def test_data_unavailable_after_release(self):
        artifact = make_artifact()
        assert artifact.data == b"x" * 100

        artifact.release()
        with pytest.raises(ProcessingError):
            _ = artifact.data

    def test_metadata(self):
        artifact = make_artifact(2048)
        assert artifact.mime_type == "image/webp"
        assert artifact.get_size_human() == "2.0 KiB"

    def test_rejects_invalid_dimensions(self):
        with pytest.raises(ValueError):
            EncodedArtifact.from_bytes(b"x", width=0, height=20, quality=0.5, scale=1.0)


class TestConfigBuilder:
    """输出目标构建测试"""

    def setup_method(self):
        self.builder = ConfigBuilder()

    def test_default_quality(self):
        target = self.builder.build_target()
        assert target == ManualTarget(quality=0.92)

    def test_explicit_quality_is_percent(self):
        target = self.builder.build_target(quality=70)
        assert isinstance(target, ManualTarget)
        assert target.quality == pytest.approx(0.7)

    def test_max_kb_becomes_budget(self):
        target = self.builder.build_target(max_kb=150)
        assert target == BudgetTarget(max_bytes=150 * 1024)

    def test_max_bytes_becomes_budget(self):
        assert self.builder.build_target(max_bytes=5000) == BudgetTarget(max_bytes=5000)

    def test_zero_budget_means_unset(self):
        target = self.builder.build_target(max_kb=0, default_quality=85)
        assert target == ManualTarget(quality=0.85)

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"quality": 80, "max_kb": 100},
            {"max_kb": 100, "max_bytes": 5000},
            {"quality": 0},
            {"quality": 101},
            {"max_bytes": -5},
        ],
    )
    def test_invalid_combinations(self, kwargs):
        with pytest.raises(ValidationError):
            self.builder.build_target(**kwargs)

    def test_rotation_and_aspect(self):
        assert self.builder.validate_rotation(180) == pytest.approx(3.141592653589793)
        assert self.builder.validate_rotation(-90) == pytest.approx(4.71238898038469)
        assert self.builder.validate_aspect(1.5) == 1.5
        with pytest.raises(ValidationError):
            self.builder.validate_aspect(0)
        with pytest.raises(ValidationError):
            self.builder.validate_rotation(float("nan"))


class TestResults:
    """结果模型测试"""

    def test_within_budget(self):
        ok = CropResult(
            success=True, input_path=Path("a.jpg"), output_size=900, max_bytes=1000
        )
        over = ok.model_copy(update={"output_size": 1200})
        manual = ok.model_copy(update={"max_bytes": None, "output_size": 10**9})

        assert ok.within_budget
        assert not over.within_budget
        assert manual.within_budget
        assert "超出预算" in over.get_summary()

    def test_compression_ratio(self):
        result = CropResult(
            success=True,
            input_path=Path("a.jpg"),
            original_size=1000,
            output_size=250,
            width=30,
            height=20,
        )
        assert result.get_compression_ratio() == pytest.approx(75.0)
        assert "30x20" in result.get_summary()

    def test_batch_summary(self):
        items = [
            BatchStatusEvent(
                index=0, name="a", state=BatchState.DONE, size_bytes=100, original_size=400
            ),
            BatchStatusEvent(index=1, name="b", state=BatchState.ERROR, error_message="bad"),
            BatchStatusEvent(index=2, name="c", state=BatchState.PENDING),
        ]
        result = BatchResult(success=True, items=items, cancelled=True)

        assert result.get_total_count() == 3
        assert result.get_success_count() == 1
        assert result.get_failure_count() == 1
        assert result.get_success_rate() == pytest.approx(100 / 3)
        assert result.get_total_original_size() == 400
        assert result.get_total_output_size() == 100
        assert result.get_summary().endswith("已取消")

    def test_status_event_is_frozen(self):
        event = BatchStatusEvent(index=0, name="a", state=BatchState.PENDING)
        with pytest.raises(ValueError):
            event.state = BatchState.DONE

    def test_log_error_is_public(self, caplog):
        ErrorHandler.log_error("写出结果", "a.webp", OSError("disk full"), "warning")

        assert "写出结果失败 [a.webp]: disk full" in caplog.text
        assert caplog.records[-1].levelname == "WARNING"

    def test_error_result(self, temp_dir: Path):
        result = ErrorHandler.handle_crop_error(
            FileNotFoundError(2, "missing", "x.jpg"), temp_dir / "x.jpg", "图像裁剪", 1000
        )
        assert not result.success
        assert result.max_bytes == 1000
        assert not result.within_budget
        assert "文件不存在" in result.error


class TestNaming:
    """输出命名测试"""

    @pytest.mark.parametrize(
        ("name", "expected"),
        [
            ("photo.jpg", "optimized_photo.webp"),
            ("holiday.final.png", "optimized_holiday.webp"),
            ("/tmp/dir/IMG_01.JPEG", "optimized_IMG_01.webp"),
        ],
    )
    def test_output_name(self, name, expected):
        assert FileNamingStrategy.generate_output_name(name) == expected

    def test_unique_path(self, temp_dir: Path):
        taken = temp_dir / "optimized_a.webp"
        taken.write_bytes(b"x")

        resolved = PathResolver.resolve_output_path("a.jpg", output_dir=temp_dir)
        assert resolved == temp_dir / "optimized_a_1.webp"
