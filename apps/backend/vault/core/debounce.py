"""
防抖執行器

短時間內多次觸發只執行最後一次，用於合併資料倉庫的連續儲存。
"""

import logging
import threading
from typing import Callable

logger = logging.getLogger(__name__)


class Debouncer:
    """
    在靜止 delay 秒後執行 func

    使用方式：
        debouncer = Debouncer(save, delay=0.8)
        debouncer.trigger()  # 0.8 秒後執行
        debouncer.trigger()  # 取消上一次，重新計時
        debouncer.flush()    # 立即執行尚未送出的呼叫

    delay <= 0 時同步執行，不建立計時器。
    同一時間只會有一個 func 呼叫在進行；flush() / wait() 會等待
    計時器執行緒上已開始的呼叫結束。
    """

    def __init__(self, func: Callable[[], None], delay: float):
        self._func = func
        self._delay = delay
        self._timer: threading.Timer | None = None
        self._cond = threading.Condition()
        # 正在執行 func 的執行緒
        self._runner: threading.Thread | None = None

    @property
    def pending(self) -> bool:
        with self._cond:
            return self._timer is not None

    @property
    def running(self) -> bool:
        with self._cond:
            return self._runner is not None

    def trigger(self) -> None:
        if self._delay <= 0:
            self._run()
            return
        with self._cond:
            if self._timer is not None:
                self._timer.cancel()
            self._timer = threading.Timer(self._delay, self._fire)
            self._timer.daemon = True
            self._timer.start()

    def _fire(self) -> None:
        with self._cond:
            # 已被 flush / cancel 取走的計時器不再執行
            if self._timer is not threading.current_thread():
                return
            self._timer = None
        try:
            self._run()
        except Exception:
            logger.exception("防抖呼叫執行失敗")

    def _run(self) -> None:
        current = threading.current_thread()
        with self._cond:
            if self._runner is current:
                # func 內部再次觸發，直接執行
                nested = True
            else:
                nested = False
                while self._runner is not None:
                    self._cond.wait()
                self._runner = current
        if nested:
            self._func()
            return
        try:
            self._func()
        finally:
            with self._cond:
                self._runner = None
                self._cond.notify_all()

    def flush(self) -> None:
        """若有排程中的呼叫，立即在目前執行緒執行；已在執行中則等待其完成"""
        with self._cond:
            timer, self._timer = self._timer, None
        if timer is None:
            self.wait()
            return
        timer.cancel()
        self._run()

    def wait(self) -> None:
        """等待進行中的呼叫結束"""
        current = threading.current_thread()
        with self._cond:
            while self._runner is not None and self._runner is not current:
                self._cond.wait()

    def cancel(self) -> None:
        with self._cond:
            timer, self._timer = self._timer, None
        if timer is not None:
            timer.cancel()
            logger.debug("已取消尚未執行的防抖呼叫")
