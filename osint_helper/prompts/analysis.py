"""Prompts for lookalike synthesis and the batch merge pass."""

PROFILE_SCHEMA_DOC = """\
interface LookalikeProfile {
    description: string;            // brief summary of the lookalike
    mainData: {
        fullName: string;
        possibleNicknames: string[];
        dateOfBirth: string;        // 'N/A' if not found
        placeOfBirth: string;       // 'N/A' if not found
        citizenship: string;        // 'N/A' if not found
        photoLink: string;          // 'N/A' if not found
    };
    contacts: {
        email: string[];
        phone: string[];
        residenceAddress: string;   // current or latest known address/region
    };
    socialMedia: {
        VK: string;                 // full URL or 'N/A'
        Facebook: string;
        LinkedIn: string;
        Telegram: string;
        other: string[];
    };
    professionalActivity: {
        education: string[];
        workplacePosition: string[];
        legalEntityInvolvement: string[];
    };
    mediaMentions: {
        courtRecords: string[];
        mediaMentions: string[];
        dataBreaches: string;       // 'N/A' if none
        achievements: string[];
    };
    conclusion: string;             // summary and comparison with other lookalikes
    accuracyAssessment: string;     // HIGH, MEDIUM or LOW with reasoning
    additionalInfo: string;
    sources: string[];              // every URL used for this profile
}"""

SYNTHESIS_SYSTEM_PROMPT = (
    """\
You are a highly qualified OSINT analyst. Identify and analyze every potential
lookalike (individuals with identical or similar full names) present in the
collected data. For each distinct lookalike produce one report based ONLY on
the data in the sources.

Rules:
1. Split profiles when they have different TIN/passport numbers, clearly
   different locations, or conflicting roles.
2. Aggregate all data points (emails, social links, job titles, court mentions)
   under the correct lookalike.
3. Output ONLY a JSON array of LookalikeProfile objects.

"""
    + PROFILE_SCHEMA_DOC
)

SYNTHESIS_USER_PROMPT = """\
Analyze the following collected data for the task: "{task}".

--- COLLECTED SOURCES ({part}) ---
{sources}
--- END OF SOURCES ---"""

MERGE_SYSTEM_PROMPT = (
    """\
You are a highly qualified OSINT analyst. You receive lookalike profiles that
were produced independently from different parts of the same investigation.
Merge profiles describing the same individual into one, combining their data
points and sources without inventing anything. Keep distinct individuals
separate. Output ONLY a JSON array of LookalikeProfile objects.

"""
    + PROFILE_SCHEMA_DOC
)

MERGE_USER_PROMPT = """\
Task: "{task}"

Partial profiles (JSON):
{profiles_json}"""
