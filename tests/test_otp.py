from ecomhub.utils.otp import OtpStore, generate_otp


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


def make_store(**kwargs):
    clock = FakeClock()
    return OtpStore(clock=clock, **kwargs), clock


def test_generate_otp_is_six_digits():
    for _ in range(50):
        otp = generate_otp()
        assert len(otp) == 6
        assert 100000 <= int(otp) <= 999999


def test_verify_returns_payload_and_is_single_use():
    store, _ = make_store()
    store.store("9876543210", "123456", {"name": "Asha"})

    result = store.verify("9876543210", "123456")
    assert result.valid
    assert result.payload == {"name": "Asha"}

    again = store.verify("9876543210", "123456")
    assert not again.valid
    assert again.message == "OTP expired or not found"


def test_unknown_phone():
    store, _ = make_store()
    assert store.verify("9000000000", "123456").message == "OTP expired or not found"


def test_wrong_code_then_lockout_after_max_attempts():
    store, _ = make_store(max_attempts=3)
    store.store("9876543210", "123456", {})

    for _ in range(3):
        result = store.verify("9876543210", "000000")
        assert result.message == "Invalid OTP"

    locked = store.verify("9876543210", "123456")
    assert not locked.valid
    assert locked.message == "Too many attempts. Please request new OTP"
    assert store.verify("9876543210", "123456").message == "OTP expired or not found"


def test_correct_code_on_last_attempt_succeeds():
    store, _ = make_store(max_attempts=3)
    store.store("9876543210", "123456", {})
    store.verify("9876543210", "000000")
    store.verify("9876543210", "111111")

    assert store.verify("9876543210", "123456").valid


def test_expired_entry_is_removed():
    store, clock = make_store(ttl_seconds=300)
    store.store("9876543210", "123456", {})
    clock.now += 301

    result = store.verify("9876543210", "123456")
    assert result.message == "OTP has expired"
    assert len(store) == 0


def test_store_replaces_previous_entry_and_resets_attempts():
    store, _ = make_store(max_attempts=3)
    store.store("9876543210", "111111", {"v": 1})
    store.verify("9876543210", "000000")
    store.verify("9876543210", "000000")
    store.store("9876543210", "222222", {"v": 2})

    assert store.verify("9876543210", "111111").message == "Invalid OTP"
    result = store.verify("9876543210", "222222")
    assert result.valid
    assert result.payload == {"v": 2}


def test_get_payload_ignores_expired_entries():
    store, clock = make_store(ttl_seconds=60)
    store.store("9876543210", "123456", {"email": "a@b.co"})
    assert store.get_payload("9876543210") == {"email": "a@b.co"}

    clock.now += 61
    assert store.get_payload("9876543210") is None


def test_purge_expired():
    store, clock = make_store(ttl_seconds=60)
    store.store("1111111111", "123456", {})
    clock.now += 30
    store.store("2222222222", "123456", {})
    clock.now += 31

    assert store.purge_expired() == 1
    assert len(store) == 1


def test_verified_marker_is_consumed_once():
    store, clock = make_store(verified_ttl_seconds=600)
    store.mark_verified("9876543210", {"customer_id": "abc"})

    assert store.consume_verified("9876543210") == {"customer_id": "abc"}
    assert store.consume_verified("9876543210") is None


def test_verified_marker_expires():
    store, clock = make_store(verified_ttl_seconds=600)
    store.mark_verified("9876543210", {})
    clock.now += 601
    assert store.consume_verified("9876543210") is None
