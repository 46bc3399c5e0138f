"""Tests for version templates, commit directives, describe and the bump engine."""

import pytest

from chored.core.errors import SubprocessError, ValidationError
from chored.core.version import Version
from chored.core.versioning import (
    BumpOptions,
    CommitDirective,
    Context,
    Engine,
    VersionTemplate,
    describe_cmd,
    describe_with_auto_deepen,
    next_version,
    parse_commit_lines,
    parse_describe,
    parse_tag,
)

DESCRIBE = ["git", "describe"]


class TestVersionTemplate:
    """Template parsing and free components."""

    def test_parts(self):
        assert VersionTemplate.parse("1.2.3").parts == (1, 2, 3)
        assert VersionTemplate.parse("1.x.0").parts == (1, "x", 0)
        assert VersionTemplate.unrestricted(3).parts == ("x", "x", "x")

    def test_pinned_template_is_free_after_its_length(self):
        t = VersionTemplate.parse("1")
        assert t.is_free(0) is False
        assert t.is_free(1) is True
        assert t.minimal_index == 1

    def test_terminated_free_span(self):
        t = VersionTemplate.parse("1.x.0")
        assert [t.is_free(i) for i in range(4)] == [False, True, False, False]
        assert t.minimal_index == 1

    def test_open_free_span(self):
        t = VersionTemplate.parse("2.x")
        assert [t.is_free(i) for i in range(4)] == [False, True, True, True]

    @pytest.mark.parametrize("template", ["1.x.2", "1.x.-", "x.1"])
    def test_invalid(self, template):
        with pytest.raises(ValidationError, match="Invalid version template"):
            VersionTemplate.parse(template)

    def test_unparseable_part(self):
        with pytest.raises(ValidationError, match="Invalid version template: 1.y"):
            VersionTemplate.parse("1.y")

    def test_parse_lax(self):
        assert VersionTemplate.parse_lax("v2.x") == VersionTemplate.parse("2.x")
        assert VersionTemplate.parse_lax("main") is None
        assert VersionTemplate.parse_lax("feature/thing") is None

    def test_unconstrained_initialises_to_zero(self):
        assert VersionTemplate.parse("-.x").initial_version() == Version([0, 0])


class TestNextVersion:
    """next_version over templates, indexes and default bumps."""

    @staticmethod
    def n(template, current, **kwargs):
        return next_version(VersionTemplate.parse(template), Version.parse(current), **kwargs).show()

    @pytest.mark.parametrize(
        "template,current,expected",
        [
            ("1.x.0", "1.1.2", "1.2.0"),
            ("1.x.0", "0.1", "1.0.0"),
            ("x.x", "0.1", "0.2"),
            ("x.x.0", "0.1", "0.2.0"),
            ("1.2", "1.2", "1.2.1"),
            ("1.2", "0.2", "1.2.0"),
            ("1.x.x.x", "0.1.2.3", "1.0.0.0"),
            ("x.x.x", "1.2.3", "1.2.4"),
        ],
    )
    def test_minimal_bump(self, template, current, expected):
        assert self.n(template, current) == expected

    def test_no_current_version(self):
        assert next_version(VersionTemplate.parse("x.x"), None).show() == "0.0"
        assert next_version(VersionTemplate.parse("2.x.0"), None).show() == "2.0.0"

    def test_explicit_index(self):
        assert self.n("x.x", "0.2", index="major") == "1.0"
        assert self.n("x.x.x", "1.2.3", index=1) == "1.3.0"

    def test_default_bump_used_only_when_free(self):
        assert self.n("x.x.x", "1.2.3", default_bump="minor") == "1.3.0"
        assert self.n("x.0", "0.2", default_bump="minor") == "1.0"

    @pytest.mark.parametrize(
        "template,index",
        [("1.x", "major"), ("1.x.0", "patch")],
    )
    def test_incompatible_index(self, template, index):
        with pytest.raises(ValidationError) as exc:
            self.n(template, "0.2", index=index)
        assert str(exc.value) == f"Requested index ({index}) is incompatible with version template: {template}"


class TestCommitDirectives:
    """parse_commit_lines."""

    def test_release(self):
        assert parse_commit_lines("abcd [release] commit") == CommitDirective(release=True, index=None)

    def test_most_significant_index_wins(self):
        lines = "abcd [release] commit\nabcd [major] commit"
        assert parse_commit_lines(lines) == CommitDirective(release=True, index="major")
        assert parse_commit_lines("[patch] a\n[minor] b").index == "minor"

    def test_index_without_release(self):
        assert parse_commit_lines("abcd [patch] commit") == CommitDirective(release=False, index="patch")

    def test_index_with_release(self):
        assert parse_commit_lines("abcd [minor-release] commit") == CommitDirective(release=True, index="minor")

    def test_empty_and_unrelated(self):
        assert parse_commit_lines("") == CommitDirective()
        assert parse_commit_lines("fix [ci] flake") == CommitDirective()


class TestDescribe:
    """git describe output and the auto-deepen loop."""

    OUTPUT = "v1.0-53-gd14d21c"

    def test_command_matches_version_tags_only(self):
        cmd = describe_cmd("HEAD")
        assert cmd[:4] == ["git", "describe", "--tags", "--first-parent"]
        assert ["--match", "v0*"] == cmd[4:6]
        assert cmd[-3:] == ["--always", "--long", "HEAD"]

    def test_parse(self):
        described = parse_describe(self.OUTPUT)
        assert (described.tag, described.commit, described.is_exact) == ("v1.0", "d14d21c", False)

    def test_parse_exact_tag_with_hyphens(self):
        described = parse_describe("v2.0-rc-1-0-gabc")
        assert described.tag == "v2.0-rc-1"
        assert described.is_exact is True

    def test_parse_untagged(self):
        assert parse_describe("abcd").tag is None

    def test_parse_unexpected(self):
        with pytest.raises(ValidationError, match="Unexpected `git describe` output"):
            parse_describe("a-b")

    @pytest.mark.asyncio
    async def test_deep_repository(self, runner):
        runner.respond(DESCRIBE, self.OUTPUT)
        described = await describe_with_auto_deepen(runner, "HEAD")
        assert described.tag == "v1.0"
        assert runner.commands("fetch") == []

    @pytest.mark.asyncio
    async def test_no_tags(self, runner):
        runner.respond(DESCRIBE, "abcd")
        assert (await describe_with_auto_deepen(runner, "HEAD")).tag is None
        assert runner.commands("fetch") == []

    @pytest.mark.asyncio
    async def test_deep_repository_failure_propagates(self, runner):
        runner.respond(DESCRIBE, False)
        with pytest.raises(SubprocessError):
            await describe_with_auto_deepen(runner, "HEAD")

    @pytest.mark.asyncio
    async def test_shallow_repository(self, runner):
        runner.respond(["stat"], True)
        runner.respond(DESCRIBE, False)
        runner.respond(DESCRIBE, self.OUTPUT)
        assert (await describe_with_auto_deepen(runner, "HEAD")).tag == "v1.0"
        assert runner.commands("fetch") == [["git", "fetch", "--deepen", "100"]]

    @pytest.mark.asyncio
    async def test_shallow_repository_unshallows_last(self, runner):
        runner.respond(["stat"], True)
        for _ in range(4):
            runner.respond(DESCRIBE, False)
        runner.respond(DESCRIBE, self.OUTPUT)

        assert (await describe_with_auto_deepen(runner, "HEAD")).tag == "v1.0"
        assert runner.commands("fetch") == [
            ["git", "fetch", "--deepen", "100"],
            ["git", "fetch", "--deepen", "100"],
            ["git", "fetch", "--deepen", "100"],
            ["git", "fetch", "--unshallow", "--tags"],
        ]

    @pytest.mark.asyncio
    async def test_shallow_repository_without_tags_gives_up(self, runner):
        runner.respond(["stat"], True)
        for _ in range(5):
            runner.respond(DESCRIBE, False)
        assert (await describe_with_auto_deepen(runner, "HEAD")).tag is None
        assert len(runner.commands("describe")) == 5
        assert len(runner.commands("fetch")) == 4


class TestEngine:
    """Engine.bump and apply_version."""

    def test_options_are_validated(self):
        with pytest.raises(ValidationError, match="Invalid action"):
            BumpOptions(action="publish")
        with pytest.raises(ValidationError, match="Invalid trigger"):
            BumpOptions(trigger="sometimes")

    def test_parse_tag(self):
        assert parse_tag("v1.2.3") == Version([1, 2, 3])
        assert parse_tag("v1.2.3-rc1") == Version([1, 2, 3])
        with pytest.raises(ValidationError):
            parse_tag("latest")

    @pytest.mark.asyncio
    async def test_unparseable_tag_is_named(self, runner):
        runner.respond(DESCRIBE, "v1-beta-2-gd14d21c")
        with pytest.raises(ValidationError, match=r"Invalid version tag: v1-beta \(nearest tag to HEAD"):
            await Engine(runner).bump(BumpOptions())
        assert runner.commands("tag") == []

    @pytest.mark.asyncio
    async def test_skips_if_already_tagged(self, runner):
        runner.respond(DESCRIBE, "v1.1-0-gd14d21c")
        assert await Engine(runner).bump(BumpOptions()) is None
        assert runner.commands("tag") == []

    @pytest.mark.asyncio
    async def test_pushes_existing_tag(self, runner):
        runner.respond(DESCRIBE, "v1.1-0-gd14d21c")
        assert await Engine(runner).bump(BumpOptions(action="push")) is None
        assert runner.commands("push") == [["git", "push", "origin", "tag", "v1.1"]]

    @pytest.mark.asyncio
    async def test_bump_uses_commit_directive(self, runner):
        runner.respond(DESCRIBE, "v1.1.0-3-gd14d21c")
        runner.respond(["git", "log"], "fix thing\n[minor] add feature")
        version = await Engine(runner).bump(BumpOptions())
        assert version == Version([1, 2, 0])
        assert ["git", "log", "--format=format:%s", "v1.1.0..HEAD", "--"] in runner.audit
        assert runner.commands("tag") == [["git", "tag", "v1.2.0", "HEAD"]]

    @pytest.mark.asyncio
    async def test_explicit_index_overrides_directive(self, runner):
        runner.respond(DESCRIBE, "v1.1.0-3-gd14d21c")
        runner.respond(["git", "log"], "[minor] add feature")
        version = await Engine(runner).bump(BumpOptions(index="major", action="print"))
        assert version == Version([2, 0, 0])
        assert runner.commands("tag") == []

    @pytest.mark.asyncio
    async def test_first_release(self, runner):
        runner.respond(DESCRIBE, "d14d21c")
        runner.respond(["git", "log"], "initial commit")
        version = await Engine(runner).bump(BumpOptions(version_template=VersionTemplate.parse("1.x")))
        assert version == Version([1, 0])
        assert ["git", "log", "--format=format:%s", "HEAD", "--"] in runner.audit

    @pytest.mark.asyncio
    async def test_commit_message_trigger_without_release(self, runner):
        runner.respond(DESCRIBE, "v1.1.0-3-gd14d21c")
        runner.respond(["git", "log"], "[minor] not yet")
        assert await Engine(runner).bump(BumpOptions(trigger="commitMessage")) is None
        assert runner.commands("tag") == []

    @pytest.mark.asyncio
    async def test_commit_message_trigger_with_release(self, runner):
        runner.respond(DESCRIBE, "v1.1.0-3-gd14d21c")
        runner.respond(["git", "log"], "[patch-release] ship it")
        version = await Engine(runner).bump(BumpOptions(trigger="commitMessage"))
        assert version == Version([1, 1, 1])

    @pytest.mark.asyncio
    async def test_pull_request_context(self, runner):
        ctx = Context(head_ref="origin/feature", merge_target_ref="origin/main")
        runner.respond(DESCRIBE, "v1.0.0-1-gabc")
        runner.respond(["git", "log"], "")
        await Engine(runner, ctx).bump(BumpOptions(action="print"))
        assert runner.commands("describe")[0][-1] == "origin/main"
        assert ["git", "log", "--format=format:%s", "v1.0.0..origin/feature", "--"] in runner.audit

    @pytest.mark.asyncio
    async def test_apply_version(self, runner):
        v = Version.parse("1.2.3")
        engine = Engine(runner)

        await engine.apply_version("print", v)
        assert runner.reset_audit() == []

        await engine.apply_version("tag", v)
        assert runner.reset_audit() == [["git", "tag", "v1.2.3", "HEAD"]]

        await engine.apply_version("push", v)
        assert runner.reset_audit() == [
            ["git", "tag", "v1.2.3", "HEAD"],
            ["git", "push", "origin", "tag", "v1.2.3"],
        ]

    @pytest.mark.asyncio
    async def test_tag_failure_propagates(self, runner):
        runner.respond(["git", "tag"], False)
        with pytest.raises(SubprocessError):
            await Engine(runner).apply_version("tag", Version([1]))
