"""
Git 检出客户端 - 通过浅克隆访问任意 git 仓库

用于既不在 GitHub 也不在 Azure DevOps 上的仓库。
每个请求的分支只克隆一次（``--depth 1``）到临时目录，
文件从工作区读取。

功能：
1. 通过 git 低速限制实现超时
2. 指数退避重试
3. 清理临时克隆
"""

import logging
import shutil
import tempfile
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from git import GitCommandError, Repo

from moduledocs.repo.base import DEFAULT_BRANCH, RepoError

logger = logging.getLogger(__name__)


# ============================================================
# 配置
# ============================================================

@dataclass(frozen=True)
class CloneConfig:
    """
    克隆配置

    Attributes:
        timeout: 低于最低速度多少秒后放弃（秒）
        max_retries: 首次失败后的额外重试次数
        retry_delay: 初始重试延迟（秒）
        backoff_factor: 每次重试的延迟倍数
    """
    timeout: int = 60
    max_retries: int = 1
    retry_delay: float = 2.0
    backoff_factor: float = 2.0


class CloneError(RepoError):
    """克隆错误基类"""
    pass


class CloneTimeoutError(CloneError):
    """克隆超时错误"""
    pass


class CloneNetworkError(CloneError):
    """网络错误"""
    pass


class CloneAuthError(CloneError):
    """认证错误"""
    pass


# ============================================================
# 克隆
# ============================================================

def clone_with_retry(url: str, branch: Optional[str] = None, config: Optional[CloneConfig] = None) -> Path:
    """
    浅克隆仓库，临时性失败会重试

    Args:
        url: 仓库 URL
        branch: 要检出的分支（None = 远程默认分支）
        config: 克隆配置

    Returns:
        临时克隆目录的路径

    Raises:
        CloneError: 所有尝试均失败
    """
    if config is None:
        config = CloneConfig()

    last_error: Optional[CloneError] = None
    delay = config.retry_delay

    for attempt in range(config.max_retries + 1):
        temp_dir = tempfile.mkdtemp(prefix="moduledocs-")
        kwargs = {"depth": 1}
        if branch:
            kwargs["branch"] = branch

        try:
            # 浅克隆，超时依赖 git 自身的低速限制
            Repo.clone_from(
                url,
                temp_dir,
                env={
                    "GIT_HTTP_LOW_SPEED_LIMIT": "1000",
                    "GIT_HTTP_LOW_SPEED_TIME": str(config.timeout),
                    "GIT_TERMINAL_PROMPT": "0",
                },
                **kwargs,
            )
            return Path(temp_dir)

        except GitCommandError as e:
            shutil.rmtree(temp_dir, ignore_errors=True)
            error_str = str(e).lower()

            if "timeout" in error_str or "timed out" in error_str:
                last_error = CloneTimeoutError(str(e))
            elif "authentication" in error_str or "403" in error_str or "401" in error_str:
                # 认证错误不重试
                last_error = CloneAuthError(str(e))
                break
            else:
                last_error = CloneNetworkError(str(e))

        except OSError as e:
            shutil.rmtree(temp_dir, ignore_errors=True)
            last_error = CloneNetworkError(str(e))

        if attempt < config.max_retries:
            logger.debug(f"Clone of {url} failed (attempt {attempt + 1}), retrying in {delay}s")
            time.sleep(delay)
            delay *= config.backoff_factor

    # 所有重试都失败
    if last_error:
        raise last_error
    raise CloneNetworkError(f"Unknown error while cloning {url}")


# ============================================================
# 客户端
# ============================================================

class GitCheckoutRepository:
    """基于临时浅克隆的仓库客户端"""

    def __init__(self, url: str, config: Optional[CloneConfig] = None):
        self.url = url
        self.config = config or CloneConfig()
        self._checkouts: dict[str, Path] = {}
        self._default_branch: Optional[str] = None

    def _checkout(self, branch: Optional[str]) -> Path:
        key = branch or ""
        if key not in self._checkouts:
            path = clone_with_retry(self.url, branch or None, self.config)
            self._checkouts[key] = path
            if not branch and self._default_branch is None:
                self._default_branch = _active_branch(path)
        return self._checkouts[key]

    def get_default_branch(self) -> str:
        """普通克隆检出的分支，无法检测时返回 ``main``"""
        if self._default_branch is None:
            try:
                self._checkout(None)
            except CloneError as e:
                logger.warning(f"Cannot clone {self.url}: {e}")
                return DEFAULT_BRANCH
        return self._default_branch or DEFAULT_BRANCH

    def get_file_content(self, path: str, branch: str) -> Optional[str]:
        """从工作区读取文件内容，不存在时返回 None"""
        root = self._checkout(self._branch_key(branch))
        target = _inside(root, path)
        if target is None or not target.is_file():
            return None
        try:
            return target.read_text(encoding="utf-8")
        except UnicodeDecodeError:
            return target.read_text(encoding="latin-1")

    def list_files(self, path: str, branch: str) -> list[tuple[str, str]]:
        """列出工作区某个目录下的文件（不递归）"""
        root = self._checkout(self._branch_key(branch))
        folder = _inside(root, path)
        if folder is None or not folder.is_dir():
            return []
        return [
            (p.name, p.relative_to(root).as_posix())
            for p in sorted(folder.iterdir(), key=lambda p: p.name.lower())
            if p.is_file()
        ]

    def _branch_key(self, branch: Optional[str]) -> Optional[str]:
        # 默认分支使用普通克隆
        if not branch or branch == self._default_branch:
            return None
        return branch

    def cleanup(self) -> None:
        """删除所有临时克隆"""
        for path in self._checkouts.values():
            shutil.rmtree(path, ignore_errors=True)
        self._checkouts.clear()

    def close(self) -> None:
        self.cleanup()


def _active_branch(path: Path) -> Optional[str]:
    try:
        return Repo(path).active_branch.name
    except (TypeError, ValueError):
        # 游离 HEAD
        return None


def _inside(root: Path, relative: str) -> Optional[Path]:
    """解析仓库内路径，拒绝跳出克隆目录的路径"""
    target = (root / relative.strip("/")).resolve()
    try:
        target.relative_to(root.resolve())
    except ValueError:
        return None
    return target
