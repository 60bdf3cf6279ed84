# 재시도 로직 유틸리티
# 주니어 개발자님께: 인증 흐름 자체는 절대 재시도하지 않습니다 (재시도는 클라이언트 책임).
# 여기서의 재시도는 프로세스 시작 시 MongoDB 연결 확인(ping)에만 사용합니다.
# 컨테이너 환경에서는 DB가 앱보다 늦게 뜨는 경우가 흔하기 때문입니다.

from tenacity import (
    retry,
    stop_after_attempt,
    wait_exponential,
    retry_if_exception_type,
    before_sleep_log,
    after_log,
)
import logging
from typing import Type, Tuple

from pymongo.errors import ConnectionFailure, ServerSelectionTimeoutError

# 로거 설정
logger = logging.getLogger(__name__)


def create_retry_decorator(
    max_attempts: int = 3,
    initial_wait: float = 1.0,
    max_wait: float = 10.0,
    exceptions: Tuple[Type[Exception], ...] = (ConnectionFailure, ServerSelectionTimeoutError)
):
    """
    재시도 데코레이터를 생성하는 팩토리 함수입니다.

    1. max_attempts: 최대 시도 횟수 (처음 1번 + 재시도 포함)
    2. initial_wait: 첫 재시도 전 대기 시간 (초). 지수 백오프의 시작 값입니다.
    3. max_wait: 최대 대기 시간 (초).
    4. exceptions: 재시도할 예외 타입.

    모든 시도가 실패하면 마지막 예외를 그대로 다시 발생시킵니다 (reraise=True).

    사용 예시:
        @create_retry_decorator(max_attempts=5)
        async def ping():
            ...
    """
    return retry(
        stop=stop_after_attempt(max_attempts),
        wait=wait_exponential(
            multiplier=2,
            min=initial_wait,
            max=max_wait
        ),
        retry=retry_if_exception_type(exceptions),
        before_sleep=before_sleep_log(logger, logging.WARNING),
        after=after_log(logger, logging.ERROR),
        reraise=True,
    )

