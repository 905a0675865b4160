import os

# 기본 디렉토리 설정
BASE_DIR = os.path.dirname(os.path.abspath(__file__))

# 경로 설정
LOG_FILE = os.path.join(BASE_DIR, "launch.log")
QUESTIONS_FILE = os.getenv("QUESTIONS_FILE", os.path.join(BASE_DIR, "questions.json"))

# 서버 설정
DEFAULT_HOST = os.getenv("HOST", "127.0.0.1")
DEFAULT_PORT = int(os.getenv("PORT", "0"))   # 0이면 빈 포트 자동 선택

# 시험 설정
EXAM_SIZE = int(os.getenv("EXAM_SIZE", "25"))              # 출제 문항 수
EXAM_DURATION_MIN = float(os.getenv("EXAM_DURATION_MIN", "20"))   # 0이면 시간 제한 없음
INCLUDE_EXPLANATIONS = os.getenv("INCLUDE_EXPLANATIONS", "1").lower() not in ("0", "false", "no")
CLOCK_TICK_SECONDS = 1.0    # 타이머 화면 갱신 주기

# 결과 전송 설정 (비어 있으면 로그로만 기록)
REPORT_ENDPOINT = os.getenv("REPORT_ENDPOINT", "")
REPORT_TIMEOUT = float(os.getenv("REPORT_TIMEOUT", "10"))
