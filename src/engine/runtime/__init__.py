"""
どこで: `engine.runtime` サブパッケージ。
何を: ジョブ（Job/JobHandle）、ポーリング型スケジューラ、再コンパイル、結果反映を提供。
なぜ: UI スレッドを止めずに GPU 計算を 1 本ずつ回し、結果と失敗を値として受け渡すため。
"""

from .collector import DisplayImage, ResultCollector
from .job import Job, JobFailure, JobHandle, JobResult, JobRunner, JobSuccess, run_job
from .recompiler import Recompiler
from .scheduler import JobScheduler
from .status import Status

__all__ = [
    "DisplayImage",
    "ResultCollector",
    "Job",
    "JobFailure",
    "JobHandle",
    "JobResult",
    "JobRunner",
    "JobSuccess",
    "run_job",
    "Recompiler",
    "JobScheduler",
    "Status",
]
