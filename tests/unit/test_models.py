"""Test models and enums."""

from dataclasses import FrozenInstanceError
from datetime import date

import pytest
from miband.models import AlertType, BatteryInfo, Sex, UserInfo
from miband.models.enums import get_sex


class TestAlertType:
    """Test AlertType lookup."""

    def test_from_name(self):
        assert AlertType.from_name("message") == AlertType.MESSAGE
        assert AlertType.from_name("Phone") == AlertType.PHONE
        assert AlertType.from_name("VIBRATE") == AlertType.VIBRATE
        assert AlertType.from_name("off") == AlertType.OFF

    def test_from_unknown_name(self):
        with pytest.raises(ValueError, match="Unrecognized notification type"):
            AlertType.from_name("email")


class TestSex:
    """Test profile sex mapping."""

    def test_names(self):
        assert get_sex("male") == Sex.MALE
        assert get_sex("Female") == Sex.FEMALE

    def test_unknown_is_other(self):
        assert get_sex("unspecified") == Sex.OTHER
        assert get_sex(7) == Sex.OTHER

    def test_enum_passthrough(self):
        assert get_sex(Sex.FEMALE) == Sex.FEMALE
        assert get_sex(0) == Sex.MALE


class TestUserInfo:
    """Test UserInfo validation and serialization."""

    def test_defaults(self):
        user = UserInfo(born=date(1985, 1, 1))

        assert user.height_cm == 170
        assert user.weight_kg == 70
        assert user.user_id == 0

    def test_sex_name_accepted(self):
        data = UserInfo(born=date(2000, 2, 29), sex="male").to_bytes()
        assert data[7] == Sex.MALE

    def test_to_bytes_length(self):
        assert len(UserInfo(born=date(2000, 1, 1)).to_bytes()) == 16

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"height_cm": -1},
            {"weight_kg": 0x10000},
            {"user_id": -5},
            {"user_id": 0x1_0000_0000},
        ],
    )
    def test_out_of_range(self, kwargs):
        with pytest.raises(ValueError, match="out of range"):
            UserInfo(born=date(2000, 1, 1), **kwargs)


def test_readouts_are_frozen():
    info = BatteryInfo(level=50, charging=False)
    with pytest.raises(FrozenInstanceError):
        info.level = 10
