from typing import List, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class Question(BaseModel):
    """
    객관식 시험 문제 모델
    Pydantic v2 적용

    문제은행 JSON의 키(question, options, correctIndex, id, explanation)를
    그대로 받는다. 빈 보기("")는 화면 표시와 유효 선택 범위에서 제외된다.
    """
    model_config = ConfigDict(populate_by_name=True)

    id: Optional[Union[int, str]] = Field(
        None,
        description="문제 식별자 (없으면 문제은행 내 위치로 채움)"
    )
    question: str = Field(
        ...,
        min_length=1,
        description="발문/문제 내용"
    )
    options: List[str] = Field(
        ...,
        description="보기 리스트 (빈 문자열은 건너뜀)"
    )
    correct_index: int = Field(
        ...,
        alias="correctIndex",
        ge=0,
        description="정답 보기의 0-based 인덱스"
    )
    explanation: Optional[str] = Field(
        None,
        description="해설 (없으면 None)"
    )

    @field_validator('options')
    @classmethod
    def validate_options_not_blank(cls, v: List[str]) -> List[str]:
        """
        검증 로직 1: 공백이 아닌 보기가 최소 1개 있어야 한다.
        """
        if not any(opt and opt.strip() for opt in v):
            raise ValueError("보기(options)에 유효한 항목이 없습니다.")
        return v

    @model_validator(mode='after')
    def validate_correct_index(self) -> 'Question':
        """
        검증 로직 2: 정답 인덱스는 반드시 비어 있지 않은 보기를 가리켜야 한다.
        """
        if not self.is_valid_choice(self.correct_index):
            raise ValueError(
                f"정답 인덱스({self.correct_index})가 유효한 보기를 가리키지 않습니다: {self.options}"
            )
        return self

    def is_valid_choice(self, index: int) -> bool:
        """보기 인덱스가 범위 안에 있고 빈 보기가 아니면 True."""
        if not 0 <= index < len(self.options):
            return False
        text = self.options[index]
        return bool(text and text.strip())

    def option_text(self, index: Optional[int]) -> str:
        if index is None or not 0 <= index < len(self.options):
            return ""
        return self.options[index]

    @property
    def presented_options(self) -> List[Tuple[int, str]]:
        """화면에 표시할 (원래 인덱스, 보기) 목록. 빈 보기는 제외."""
        return [(i, opt) for i, opt in enumerate(self.options) if opt and opt.strip()]
