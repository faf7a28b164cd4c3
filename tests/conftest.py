import pytest


class MemoryStorage:
    """In-memory fingerprint store."""

    def __init__(self, values=None):
        self.values = dict(values or {})
        self.writes = []

    def get_value(self, key, default=""):
        return self.values.get(key, default)

    def set_value(self, key, value):
        self.values[key] = value
        self.writes.append((key, value))


class RecordingNotifier:
    def __init__(self, fail_for=()):
        self.sent = []
        self.fail_for = fail_for

    def send(self, message):
        if any(name in message for name in self.fail_for):
            return False
        self.sent.append(message)
        return True


SIMPLE_CHANGELOG = """# Changelog

## 1.2

- Added thing one
- fix: raw text kept.
  - nested is ignored
* star is ignored

## 1.1

- Old entry
"""

STANDARD_CHANGELOG = """# @wagmi/core

## 2.16.4

### Patch Changes

- [#4500](https://github.com/wevm/wagmi/pull/4500) [`b2c3d4e`](https://github.com/wevm/wagmi/commit/b2c3d4e) Thanks [@tmm](https://github.com/tmm)! - Fixed `getBalance` for chains without multicall.

- Updated dependencies [[`b2c3d4e`](https://github.com/wevm/wagmi/commit/b2c3d4e)]:
  - @wagmi/connectors@5.7.1
    - nested detail entry here

## 2.16.3

- Older change entry here
"""

COMPLEX_CHANGELOG = """# ai

## 1.2.3

### Patch Changes

- Updated dependencies [abc1234]
  - @ai-sdk/provider-utils@2.0.1

## 1.2.2

### Patch Changes

- 5ad1f0e: fix (ai): throw error when tool call is invalid
- 1f2e3d4: feat: add callback support to streamText

## 1.2.1

### Patch Changes

- 9a8b7c6: chore: something else entirely
"""

HEADINGS_PAGE = """<html><body>
<h1>Changelog</h1>
<h2>Cursor 1.4: Agent improvements</h2>
<p>Intro text</p>
<h3>Background agents</h3>
<p>More details</p>
<h3>Faster tab</h3>
<details><summary>Improvements (2)</summary><ul><li>Better diffs</li><li> Quicker search </li></ul></details>
<details><summary>Patches</summary><ul><li>1.4.1: Fixed login loop</li><li>1.4.2: Fixed crash on exit</li></ul></details>
<h2>Cursor 1.3</h2>
<h3>Old stuff</h3>
</body></html>
"""

ARTICLES_PAGE = """<html><body><main>
<article><h2>Turbopack update</h2><p>March 3rd, 2025</p><p>Faster builds.</p></article>
<article><h2>v0 now supports Figma imports</h2><p>Posted on March 2nd, 2025</p><p>Import designs directly.</p><ul><li>Frames</li><li>Components</li></ul></article>
<article><h2>AI Elements 1.1</h2><p>February 28, 2025</p><p>New components.</p></article>
</main></body></html>
"""


@pytest.fixture
def storage():
    return MemoryStorage()


@pytest.fixture
def notifier():
    return RecordingNotifier()
