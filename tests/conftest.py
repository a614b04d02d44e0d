import pytest

class FakeAdmin:
    """Stands in for ``client.admin``; replays scripted replies per command."""

    def __init__(self, **replies):
        self.replies = {name: list(seq) for name, seq in replies.items()}
        self.calls = []

    def command(self, name, *args, **kwargs):
        self.calls.append((name, args, kwargs))
        seq = self.replies.get(name)
        if not seq:
            return {"ok": 1}
        # the last reply repeats once the script runs out
        reply = seq.pop(0) if len(seq) > 1 else seq[0]
        if isinstance(reply, Exception):
            raise reply
        return reply

    def names(self):
        return [c[0] for c in self.calls]

class FakeClient:
    def __init__(self, admin):
        self.admin = admin
        self.closed = False

    def close(self):
        self.closed = True

class FakeSleep:
    def __init__(self):
        self.total = 0.0
        self.calls = 0

    def __call__(self, seconds):
        self.calls += 1
        self.total += seconds

def status_doc(*states, name="rs0"):
    return {
        "ok": 1,
        "set": name,
        "members": [
            {"name": f"localhost:{27017 + i}", "stateStr": s, "health": 1}
            for i, s in enumerate(states)
        ],
    }

@pytest.fixture
def fake_sleep():
    return FakeSleep()

@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    for var in (
        "MONGO_REPLICA_SET_NAME",
        "MONGO_REPLICA_SET_HOST",
        "MONGO_INITDB_ROOT_USERNAME",
        "MONGO_INITDB_ROOT_PASSWORD",
        "MONGO_BOOTSTRAP_PROFILE",
        "MONGO_BOOTSTRAP_URI",
        "MONGO_BOOTSTRAP_MAX_ATTEMPTS",
        "MONGO_BOOTSTRAP_INTERVAL",
    ):
        monkeypatch.delenv(var, raising=False)
    # keep a developer's local mongo_bootstrap.yml out of the tests
    blank = tmp_path / "mongo_bootstrap.yml"
    blank.write_text("")
    monkeypatch.setenv("MONGO_BOOTSTRAP_CONFIG", str(blank))
    return monkeypatch
