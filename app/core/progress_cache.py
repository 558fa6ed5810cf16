"""
批量筛选进度内存缓存模块

批量简历处理过程中记录实时进度，避免每处理一份简历就写一次数据库。
前端通过轮询 /bulk-jobs/{id}/progress 获取进度。
"""
from typing import Dict, Optional
from dataclasses import dataclass, asdict
from threading import Lock


@dataclass
class TaskProgress:
    """批量任务进度数据"""
    total: int = 0
    processed: int = 0
    qualified: int = 0
    current_file: str = ""

    @property
    def progress(self) -> int:
        """进度百分比"""
        if self.total <= 0:
            return 0
        return int(self.processed / self.total * 100)

    def to_dict(self) -> dict:
        data = asdict(self)
        data["progress"] = self.progress
        return data


class ProgressCache:
    """
    线程安全的进度缓存

    使用内存字典存储任务进度，任务完成后由调用方清理。
    """

    def __init__(self):
        self._cache: Dict[str, TaskProgress] = {}
        self._lock = Lock()

    def start(self, task_id: str, total: int) -> None:
        """登记一个新任务"""
        with self._lock:
            self._cache[task_id] = TaskProgress(total=total)

    def update(
        self,
        task_id: str,
        processed: int = None,
        qualified: int = None,
        current_file: str = None
    ) -> None:
        """更新任务进度"""
        with self._lock:
            if task_id not in self._cache:
                self._cache[task_id] = TaskProgress()

            entry = self._cache[task_id]
            if processed is not None:
                entry.processed = processed
            if qualified is not None:
                entry.qualified = qualified
            if current_file is not None:
                entry.current_file = current_file

    def get(self, task_id: str) -> Optional[TaskProgress]:
        """获取任务进度"""
        with self._lock:
            return self._cache.get(task_id)

    def remove(self, task_id: str) -> None:
        """移除任务进度（任务完成后调用）"""
        with self._lock:
            self._cache.pop(task_id, None)


# 全局单例
progress_cache = ProgressCache()
