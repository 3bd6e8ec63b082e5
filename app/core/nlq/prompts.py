# -----------------------------------------------------------------------------
# PROMPTS
# Purpose: every prompt and fixed user-facing message the pipeline uses.
# -----------------------------------------------------------------------------

# Columns that must never be selected from the provider tables
SENSITIVE_FIELDS = (
    "email",
    "phoneNumber",
    "address",
    "city",
    "state",
    "zipCode",
    "consultation_fee",
)

NON_MEDICAL_REFUSAL = (
    "I'm sorry, but I can only help with medical, health, veterinary, or "
    "healthcare-related questions. Please ask about symptoms, conditions, "
    "treatments, doctors, or appointments."
)

HEALTH_APOLOGY = (
    "Sorry, I'm unable to answer that question right now. Please try again "
    "later, and consult a healthcare professional for medical advice."
)

SUMMARY_APOLOGY = (
    "Sorry, I couldn't summarize these results. The query returned {count} "
    "results; please check the results tab for the details."
)

HEALTH_DISCLAIMER = "Please consult a healthcare professional for personal medical advice."


DOMAIN_CHECK_PROMPT = """
You decide whether a question is in scope for a healthcare clinic assistant.

In scope: medical conditions, diseases, symptoms, treatments, medications,
health and wellness, healthcare providers (doctors, specialists, veterinarians),
appointments, medical coding (ICD, CPT), and veterinary or animal care.

Respond with exactly one word:
- "true" if the question is in scope
- "false" if it is not

DO NOT return anything else. No explanations.

Question: {question}
"""


INTENT_CHECK_PROMPT = """
You are an expert in medical software and healthcare knowledge. Your task is to classify the following question.

Respond only with:
- "database" if the question should be answered with a SQL query against the clinic database
  (counts, listings or lookups of doctors, veterinary doctors, specialties, appointments, diseases, symptoms),
- "health" if the question is about general health knowledge, medical conditions, ICD/CPT codes, symptoms, or treatments.

DO NOT return anything else. No explanations.

Question: {question}
"""


SCHEMA_DESCRIPTION = """
- Table 'medical_specialties':
  * id (primary key, INT IDENTITY)
  * name (VARCHAR(100), NOT NULL, UNIQUE)
  * description (TEXT)
  * created_at (DATETIME, DEFAULT GETDATE())

- Table 'doctors':
  * id (primary key, INT IDENTITY)
  * firstName (VARCHAR(100), NOT NULL)
  * lastName (VARCHAR(100), NOT NULL)
  * fullName (computed column: firstName + ' ' + lastName)
  * specialtyId (INT, foreign key to medical_specialties.id)
  * experience_years (INT)
  * qualification (VARCHAR(500))
  * is_available (BIT, DEFAULT 1)
  * rating (DECIMAL(3,2), DEFAULT 0.00)
  * created_at (DATETIME, DEFAULT GETDATE())

- Table 'veterinary_doctors':
  * id (primary key, INT IDENTITY)
  * firstName (VARCHAR(100), NOT NULL)
  * lastName (VARCHAR(100), NOT NULL)
  * fullName (computed column: firstName + ' ' + lastName)
  * specialization (VARCHAR(200)) -- e.g., Small Animals, Large Animals, Exotic Animals
  * experience_years (INT)
  * qualification (VARCHAR(500))
  * is_available (BIT, DEFAULT 1)
  * rating (DECIMAL(3,2), DEFAULT 0.00)
  * created_at (DATETIME, DEFAULT GETDATE())

- Table 'human_diseases':
  * id (primary key, INT IDENTITY)
  * name (VARCHAR(200), NOT NULL)
  * description (TEXT)
  * common_symptoms (TEXT) -- JSON array or comma-separated
  * severity_level (VARCHAR(20)) -- 'Mild', 'Moderate', 'Severe', 'Critical'
  * recommended_specialty_id (INT, foreign key to medical_specialties.id)
  * prevention_tips (TEXT)
  * when_to_see_doctor (TEXT)
  * created_at (DATETIME, DEFAULT GETDATE())

- Table 'animal_diseases':
  * id (primary key, INT IDENTITY)
  * name (VARCHAR(200), NOT NULL)
  * description (TEXT)
  * common_symptoms (TEXT) -- JSON array or comma-separated
  * affected_animals (VARCHAR(500)) -- e.g., Dogs, Cats, Birds
  * severity_level (VARCHAR(20)) -- 'Mild', 'Moderate', 'Severe', 'Critical'
  * prevention_tips (TEXT)
  * when_to_see_vet (TEXT)
  * created_at (DATETIME, DEFAULT GETDATE())

- Table 'symptoms':
  * id (primary key, INT IDENTITY)
  * name (VARCHAR(200), NOT NULL, UNIQUE)
  * description (TEXT)
  * body_system (VARCHAR(100)) -- e.g., Respiratory, Cardiovascular, Digestive
  * severity_indicator (VARCHAR(20)) -- 'Mild', 'Moderate', 'Severe'
  * created_at (DATETIME, DEFAULT GETDATE())

- Table 'human_disease_symptoms':
  * id (primary key, INT IDENTITY)
  * disease_id (INT, foreign key to human_diseases.id)
  * symptom_id (INT, foreign key to symptoms.id)
  * is_primary_symptom (BIT, DEFAULT 0)

- Table 'animal_disease_symptoms':
  * id (primary key, INT IDENTITY)
  * disease_id (INT, foreign key to animal_diseases.id)
  * symptom_id (INT, foreign key to symptoms.id)
  * is_primary_symptom (BIT, DEFAULT 0)

- Table 'appointments':
  * id (primary key, INT IDENTITY)
  * patient_name (VARCHAR(200), NOT NULL)
  * doctor_id (INT, foreign key to doctors.id)
  * vet_doctor_id (INT, foreign key to veterinary_doctors.id)
  * appointment_date (DATETIME, NOT NULL)
  * appointment_type (VARCHAR(50)) -- 'Human' or 'Animal'
  * animal_type (VARCHAR(100)) -- for animal appointments
  * symptoms_description (TEXT)
  * status (VARCHAR(20), DEFAULT 'Scheduled') -- 'Scheduled', 'Completed', 'Cancelled', 'No-Show'
  * created_at (DATETIME, DEFAULT GETDATE())

Available Views:
- vw_human_diseases_with_symptoms: diseases with their symptoms concatenated
- vw_animal_diseases_with_symptoms: animal diseases with their symptoms concatenated

Available Stored Procedures:
- GetHumanDiseasesBySymptoms: find diseases by comma-separated symptoms
- GetAnimalDiseasesBySymptoms: find animal diseases by symptoms and optional animal type
- GetDoctorsBySpecialty: doctors by specialty name (excludes sensitive information)
- GetVeterinaryDoctors: veterinary doctors by optional specialization
"""


TRANSLATE_PROMPT = """
You are a medical database expert. Convert this English question to {dialect}.

IMPORTANT: Use the exact table names as defined below.
Database schema:
{schema}

IMPORTANT SECURITY RULES:
1. NEVER include or query these sensitive fields: {sensitive_fields}
2. When querying doctors or veterinary_doctors, only select: id, firstName, lastName, fullName,
   specialtyId/specialization, experience_years, qualification, is_available, rating, created_at
3. Use {dialect} syntax only
4. Write exactly one read-only SELECT statement (or one EXEC of a listed stored procedure)

Only respond with the SQL query, nothing else.

Question: {question}
"""


SUMMARY_PROMPT = """
You are a medical database assistant. Summarize these query results in a clear, concise way for the user.

IMPORTANT: The actual number of results is {count}. Make sure your summary reflects this exact number.

Original question: {question}

Query results (JSON format):
{results}

Provide a brief summary that:
1. Answers the original question directly
2. Explicitly states there are {count} results found
3. Highlights 1-2 key pieces of information from the results
4. Is written in natural language (not technical)
5. MUST use the exact result count of {count}

Keep it to 2-3 sentences maximum.
"""


HEALTH_ANSWER_PROMPT = """
You are a helpful and knowledgeable medical assistant for a healthcare clinic.
Answer the following health-related question in a clear, concise, and accurate manner.
If the question is about symptoms, treatments, medications, ICD codes, CPT codes, veterinary care,
or general health, provide an informative answer. If you don't know the answer, say so.

Keep it to 2-3 sentences maximum, and always end by advising the user to consult a healthcare professional.

Question: {question}
"""
