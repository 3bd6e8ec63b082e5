import pytest
from sqlalchemy.exc import ProgrammingError

from app.core.exceptions import QuestionValidationError
from app.core.nlq import prompts
from app.core.nlq.pipeline import MedicalQueryPipeline, PipelineRun, PipelineState
from app.core.schemas import QuestionType, Tab

from conftest import FakeStore, FakeTextGenerator, TRANSLATE, doctor_rows

S = PipelineState


@pytest.mark.asyncio
async def test_non_medical_path():
    generator = FakeTextGenerator(domain="false")
    pipeline = MedicalQueryPipeline(generator, FakeStore())

    run = await pipeline.run_pipeline("What is the weather today?")
    response = run.to_response()

    assert run.trace == [S.RECEIVED, S.CLASSIFYING, S.NON_MEDICAL_ANSWER]
    assert response.type == QuestionType.NON_MEDICAL
    assert response.tab == Tab.CHAT
    assert response.answer == prompts.NON_MEDICAL_REFUSAL


@pytest.mark.asyncio
async def test_database_path():
    generator = FakeTextGenerator(
        intent="database",
        translate="SELECT id, fullName FROM doctors WHERE specialty = 'Cardiology'",
        summary="There are 3 cardiologists available.",
    )
    store = FakeStore(rows=doctor_rows(3))
    pipeline = MedicalQueryPipeline(generator, store)

    run = await pipeline.run_pipeline("How many cardiologists are available?")
    response = run.to_response()

    assert run.trace == [
        S.RECEIVED,
        S.CLASSIFYING,
        S.TRANSLATING,
        S.EXECUTING,
        S.SUMMARIZING,
        S.DATABASE_ANSWER,
    ]
    assert response.type == QuestionType.DATABASE
    assert response.tab == Tab.RESULTS
    assert "3" in response.answer
    assert response.sql == store.queries[0]
    assert len(response.results) == 3
    assert response.error is None


@pytest.mark.asyncio
async def test_health_path():
    pipeline = MedicalQueryPipeline(FakeTextGenerator(), FakeStore())

    run = await pipeline.run_pipeline("What are the symptoms of flu?")
    response = run.to_response()

    assert run.trace == [S.RECEIVED, S.CLASSIFYING, S.HEALTH_ANSWERING, S.HEALTH_ANSWER]
    assert response.type == QuestionType.HEALTH
    assert response.tab == Tab.CHAT
    assert response.sql is None
    assert response.error is None


@pytest.mark.asyncio
async def test_translation_failure_falls_back_to_health():
    generator = FakeTextGenerator(intent="database", translate=RuntimeError("rate limited"))
    store = FakeStore(rows=doctor_rows(2))
    pipeline = MedicalQueryPipeline(generator, store)

    run = await pipeline.run_pipeline("How many doctors are there?")
    response = run.to_response()

    assert run.trace == [
        S.RECEIVED,
        S.CLASSIFYING,
        S.TRANSLATING,
        S.HEALTH_ANSWERING,
        S.HEALTH_ANSWER,
    ]
    assert response.type == QuestionType.HEALTH
    assert response.tab == Tab.CHAT
    assert response.sql is None
    assert response.error is None
    assert response.answer == generator.replies["health"]
    assert store.queries == []


@pytest.mark.asyncio
async def test_execution_failure_falls_back_with_error():
    generator = FakeTextGenerator(intent="database", translate="SELECT nope FROM doctors")
    error = ProgrammingError("SELECT nope FROM doctors", {}, Exception("Invalid column name 'nope'."))
    pipeline = MedicalQueryPipeline(generator, FakeStore(error=error))

    run = await pipeline.run_pipeline("List doctors")
    response = run.to_response()

    assert run.trace == [
        S.RECEIVED,
        S.CLASSIFYING,
        S.TRANSLATING,
        S.EXECUTING,
        S.HEALTH_ANSWERING,
        S.HEALTH_ANSWER,
    ]
    assert response.type == QuestionType.HEALTH
    assert response.error == "Invalid column name 'nope'."
    assert response.answer == generator.replies["health"]
    assert response.sql is None


@pytest.mark.asyncio
async def test_database_path_with_no_rows():
    generator = FakeTextGenerator(intent="database", summary="No doctors matched.")
    pipeline = MedicalQueryPipeline(generator, FakeStore(rows=[]))

    response = await pipeline.answer("List dermatologists")

    assert response.type == QuestionType.DATABASE
    assert response.results == []
    assert "0" in response.answer


@pytest.mark.asyncio
@pytest.mark.parametrize("question", [None, "", "   \n", 42, ["How many doctors?"]])
async def test_invalid_question_is_rejected(question):
    generator = FakeTextGenerator()
    pipeline = MedicalQueryPipeline(generator, FakeStore())

    with pytest.raises(QuestionValidationError):
        await pipeline.answer(question)

    assert generator.calls == []


@pytest.mark.asyncio
async def test_question_is_trimmed():
    pipeline = MedicalQueryPipeline(FakeTextGenerator(), FakeStore())
    response = await pipeline.answer("  What is a CPT code?  ")
    assert response.question == "What is a CPT code?"


@pytest.mark.asyncio
async def test_repeated_question_has_same_shape():
    generator = FakeTextGenerator(intent="database", summary="There are 2 doctors.")
    pipeline = MedicalQueryPipeline(generator, FakeStore(rows=doctor_rows(2)))

    first = await pipeline.answer("List doctors")
    second = await pipeline.answer("List doctors")

    assert first.model_dump(exclude_none=True).keys() == second.model_dump(exclude_none=True).keys()
    assert first.type == second.type
    assert first.tab == second.tab


@pytest.mark.asyncio
async def test_sql_is_sanitized_before_execution():
    generator = FakeTextGenerator(
        intent="database", translate="SELECT fullName, email, phoneNumber FROM doctors"
    )
    store = FakeStore(rows=doctor_rows(1))
    await MedicalQueryPipeline(generator, store).answer("List doctors with contact details")

    assert generator.kinds().count(TRANSLATE) == 1
    assert store.queries == ["SELECT fullName FROM doctors"]


def test_illegal_transition_is_rejected():
    run = PipelineRun(question="List doctors")
    with pytest.raises(RuntimeError):
        run.advance(S.EXECUTING)


def test_unfinished_run_has_no_response():
    run = PipelineRun(question="List doctors")
    with pytest.raises(RuntimeError):
        run.to_response()
