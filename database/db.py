from sqlalchemy import create_engine, event         # SQLAlchemy 엔진 생성 도구
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base        # 모델의 Base 클래스
from sqlalchemy.orm import sessionmaker            # 세션 팩토리 함수

from config.settings import settings               # ✅ 환경변수 설정 파일 불러오기


def configure_sqlite(sqlite_engine: Engine) -> Engine:
    """
    pysqlite 드라이버는 BEGIN을 늦게 보내서 SAVEPOINT(begin_nested)가 제대로 동작하지 않음
    → 드라이버 자체 트랜잭션 처리를 끄고 BEGIN을 직접 발행 (SQLAlchemy 문서 권장 방식)
    """
    @event.listens_for(sqlite_engine, "connect")
    def _disable_pysqlite_begin(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(sqlite_engine, "begin")
    def _emit_begin(conn):
        conn.exec_driver_sql("BEGIN")

    return sqlite_engine


_is_sqlite = settings.DATABASE_URL.startswith("sqlite")

# ✅ 환경변수에서 DB 연결 URL을 불러와 엔진 생성
engine = create_engine(
    settings.DATABASE_URL,
    connect_args={"check_same_thread": False} if _is_sqlite else {},
)
if _is_sqlite:
    configure_sqlite(engine)

# ✅ 세션 팩토리: DB 연결에 사용할 세션 생성기 정의
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# ✅ 모델 정의 시 상속할 Base 클래스 (Declarative 방식 사용)
Base = declarative_base()


# ✅ FastAPI 의존성: 요청 단위 세션
def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
