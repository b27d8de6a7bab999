"""Keyword tables, phrase dictionaries and prototypes for intent routing.

Plain data only. Classifiers read these tables; nothing here has behaviour.
Each weighted entry is ``(keyword, weight, domains)``. Entries tagged with
the ``general`` domain are intent cues ("total", "why") rather than topic
words ("calories", "mood") and feed mixed-query detection.
"""

from __future__ import annotations

import re

from butler.routing.schemas import IntentType

WeightedKeyword = tuple[str, float, tuple[str, ...]]

GENERAL = "general"

_G = (GENERAL,)

# ---------------------------------------------------------------------------
# Aggregation cues
# ---------------------------------------------------------------------------

AGGREGATE_KEYWORDS: dict[str, list[WeightedKeyword]] = {
    "zh": [
        ("总计", 2.0, ("finance", GENERAL)),
        ("总额", 2.0, ("finance",)),
        ("总共", 1.8, _G),
        ("一共", 1.8, _G),
        ("合计", 2.0, ("finance",)),
        ("平均", 2.0, ("health", "finance", GENERAL)),
        ("均值", 1.8, ("health", "finance")),
        ("平均数", 1.8, _G),
        ("数量", 1.5, _G),
        ("个数", 1.5, _G),
        ("多少个", 1.8, _G),
        ("多少钱", 2.0, ("finance",)),
        ("花了多少", 2.0, ("finance",)),
        ("消费", 1.8, ("finance",)),
        ("支出", 2.0, ("finance",)),
        ("收入", 2.0, ("finance",)),
        ("最大", 1.5, _G),
        ("最小", 1.5, _G),
        ("最高", 1.8, ("health", "finance")),
        ("最低", 1.8, ("health", "finance")),
        ("卡路里", 2.0, ("meals", "health")),
        ("体重", 2.0, ("health",)),
        ("睡眠时间", 2.0, ("health",)),
        ("锻炼时间", 2.0, ("health",)),
        ("吃饭花", 2.5, ("meals", "finance")),
        ("本月", 1.5, _G),
        ("这个月", 1.5, _G),
        ("这月", 1.5, _G),
        ("今年", 1.5, _G),
        ("统计", 2.0, _G),
        ("计算", 2.0, _G),
        ("多少", 2.5, ("finance", GENERAL)),
    ],
    "en": [
        ("total", 2.0, ("finance", GENERAL)),
        ("sum", 2.0, ("finance", GENERAL)),
        ("amount", 2.0, ("finance",)),
        ("altogether", 1.5, _G),
        ("average", 2.0, ("health", "finance", GENERAL)),
        ("mean", 1.8, _G),
        ("avg", 1.8, _G),
        ("count", 1.5, _G),
        ("number of", 1.8, _G),
        ("how many", 1.8, _G),
        ("how much", 2.0, ("finance",)),
        ("spend", 2.0, ("finance",)),
        ("spent", 2.0, ("finance",)),
        ("cost", 2.0, ("finance",)),
        ("expense", 2.0, ("finance",)),
        ("paid", 1.8, ("finance",)),
        ("income", 2.0, ("finance",)),
        ("revenue", 1.8, ("finance",)),
        ("maximum", 1.5, _G),
        ("minimum", 1.5, _G),
        ("highest", 1.8, ("health", "finance")),
        ("lowest", 1.8, ("health", "finance")),
        ("max", 1.5, _G),
        ("min", 1.5, _G),
        ("calories", 2.0, ("meals", "health")),
        ("weight", 2.0, ("health",)),
        ("sleep", 2.0, ("health",)),
        ("exercise", 2.0, ("health",)),
        ("this month", 1.5, _G),
        ("monthly", 1.5, _G),
        ("this year", 1.5, _G),
        ("yearly", 1.5, _G),
        ("calculate", 2.0, _G),
        ("compute", 2.0, _G),
    ],
}

# ---------------------------------------------------------------------------
# Retrieval cues
# ---------------------------------------------------------------------------

RETRIEVAL_KEYWORDS: dict[str, list[WeightedKeyword]] = {
    "zh": [
        ("告诉我", 1.5, _G),
        ("解释", 2.0, _G),
        ("说明", 1.8, _G),
        ("描述", 1.8, _G),
        ("建议", 2.0, _G),
        ("推荐", 2.0, _G),
        ("怎么办", 2.0, _G),
        ("如何", 2.0, _G),
        ("为什么", 2.5, _G),
        ("原因", 2.0, _G),
        ("分析", 2.5, _G),
        ("历史", 1.5, _G),
        ("记录", 1.5, _G),
        ("发生了什么", 1.8, _G),
        ("改进", 2.0, _G),
        ("优化", 2.0, _G),
        ("提高", 1.8, _G),
        ("心情", 1.8, ("journals", "health")),
        ("情绪", 2.0, ("journals", "health")),
        ("感觉", 1.5, ("journals", "health")),
        ("健康", 2.0, ("health",)),
        ("饮食", 2.0, ("meals", "health")),
        ("吃饭", 2.0, ("meals",)),
        ("餐", 1.8, ("meals",)),
        ("学习", 2.0, ("education",)),
        ("工作", 2.0, ("career",)),
        ("睡眠", 2.0, ("health",)),
        ("锻炼", 2.0, ("health",)),
        ("财务", 2.0, ("finance",)),
        ("日记", 2.0, ("journals",)),
    ],
    "en": [
        ("tell me", 1.5, _G),
        ("explain", 2.0, _G),
        ("describe", 1.8, _G),
        ("show me", 1.5, _G),
        ("recommend", 2.0, _G),
        ("suggest", 2.0, _G),
        ("advice", 2.0, _G),
        ("help", 1.5, _G),
        ("why", 2.5, _G),
        ("reason", 2.0, _G),
        ("analyze", 2.5, _G),
        ("analysis", 2.5, _G),
        ("history", 1.5, _G),
        ("record", 1.5, _G),
        ("what happened", 1.8, _G),
        ("story", 1.5, _G),
        ("improve", 2.0, _G),
        ("optimize", 2.0, _G),
        ("enhance", 1.8, _G),
        ("mood", 2.0, ("journals", "health")),
        ("feeling", 1.8, ("journals", "health")),
        ("emotion", 2.0, ("journals", "health")),
        ("health", 2.0, ("health",)),
        ("diet", 2.0, ("meals", "health")),
        ("food", 2.0, ("meals",)),
        ("meal", 2.0, ("meals",)),
        ("eating", 1.8, ("meals",)),
        ("study", 2.0, ("education",)),
        ("work", 2.0, ("career",)),
        ("finance", 2.0, ("finance",)),
        ("sleep", 2.0, ("health",)),
        ("exercise", 2.0, ("health",)),
        ("journal", 2.0, ("journals",)),
        ("diary", 2.0, ("journals",)),
    ],
}

REMINDER_KEYWORDS: dict[str, list[str]] = {
    "zh": ["提醒", "闹钟", "定时", "计划", "每天", "每周", "每月", "定期", "重复", "循环", "周期性"],
    "en": [
        "remind", "reminder", "alarm", "schedule", "every day", "daily",
        "weekly", "monthly", "repeat", "recurring", "periodic", "rrule",
    ],
}

# ---------------------------------------------------------------------------
# Phrase dictionaries for the translated query variant
# ---------------------------------------------------------------------------

EN_TO_ZH: dict[str, str] = {
    "how much": "多少",
    "why": "为什么",
    "total": "总计",
    "average": "平均",
    "analyze": "分析",
    "suggest": "建议",
    "improve": "改进",
    "spending": "消费",
    "expense": "支出",
    "income": "收入",
    "eating": "吃饭",
    "mood": "心情",
    "health": "健康",
    "this month": "这个月",
    "last month": "上个月",
    "today": "今天",
    "yesterday": "昨天",
    "this week": "本周",
    "last week": "上周",
}

ZH_TO_EN: dict[str, str] = {
    "多少钱": "how much money",
    "为什么": "why",
    "怎么办": "what to do",
    "总计": "total",
    "平均": "average",
    "分析": "analyze",
    "建议": "suggest",
    "改进": "improve",
    "消费": "spending",
    "支出": "expense",
    "收入": "income",
    "吃饭": "eating",
    "心情": "mood",
    "健康": "health",
    "这个月": "this month",
    "上个月": "last month",
    "今天": "today",
    "昨天": "yesterday",
    "本周": "this week",
    "上周": "last week",
}

# ---------------------------------------------------------------------------
# Mixed queries: a number and an explanation in one question
# ---------------------------------------------------------------------------

MIXED_PATTERNS: list[re.Pattern[str]] = [
    re.compile(r"(how much|total|amount|spent).*and.*(why|explain|suggest|improve|advice)", re.IGNORECASE),
    re.compile(r"(calculate|sum).*and.*(analyze|recommend)", re.IGNORECASE),
    re.compile(r"(show me).*and.*(help|advice)", re.IGNORECASE),
    re.compile(r"(多少钱|总计|花费).*为什么"),
    re.compile(r"(总计|计算).*建议"),
    re.compile(r"(多少|数量).*分析"),
    re.compile(r"(支出|消费).*改进"),
]

# ---------------------------------------------------------------------------
# Prototype utterances for the similarity stage
# ---------------------------------------------------------------------------

PROTOTYPES: dict[IntentType, list[str]] = {
    IntentType.AGGREGATE: [
        "How much money did I spend on groceries this month?",
        "What's the total amount of my expenses?",
        "Show me the average cost per meal",
        "Count how many books I read this year",
        "What's my highest expense category?",
        "这个月我花了多少钱？",
        "我的平均支出是多少？",
        "计算我今年的总收入",
    ],
    IntentType.RETRIEVAL: [
        "Tell me about my recent activities",
        "What happened last week?",
        "Explain my spending patterns",
        "Show me my journal entries about travel",
        "Recommend books based on my reading history",
        "告诉我最近发生了什么",
        "解释一下我的消费习惯",
        "推荐一些适合我的电影",
    ],
    IntentType.REMINDER: [
        "Remind me to exercise every morning",
        "Set up a weekly review schedule",
        "Create a recurring alarm for medication",
        "Schedule monthly budget review",
        "每天提醒我喝水",
        "设置每周的会议提醒",
        "创建定期的任务提醒",
    ],
}
