from typing import Callable, List, Tuple

RAG_ANSWER = (
    "RAG (Retrieval-Augmented Generation) is a technique that enhances large language models "
    "by retrieving relevant documents from an external knowledge base and adding them to the "
    "prompt before generating a response. This grounds answers in up-to-date, domain-specific "
    "information and reduces hallucinations. A typical RAG pipeline has three steps: index your "
    "documents as embeddings, retrieve the most similar chunks for a question, and generate an "
    "answer from those chunks."
)

NEURAL_NETWORK_ANSWER = (
    "Neural networks are computing systems inspired by the brain. They are made of layers of "
    "connected neurons that transform inputs through weighted sums and activation functions. "
    "Deep learning uses networks with many layers, trained with backpropagation and gradient "
    "descent, to learn hierarchical representations of images, text and audio."
)

TRANSFORMER_ANSWER = (
    "The Transformer is a neural network architecture built on self-attention. Instead of "
    "reading a sequence step by step, attention lets every token weigh every other token in "
    "parallel. Transformers power modern language models such as GPT and BERT."
)

LLM_ANSWER = (
    "Large Language Models (LLMs) are transformer-based models trained on huge text corpora to "
    "predict the next token. With prompting, fine-tuning and tools such as retrieval, they can "
    "answer questions, summarize documents, write code and hold conversations."
)

VECTOR_DATABASE_ANSWER = (
    "Vector databases store embeddings, numeric vectors that capture the meaning of text, "
    "images or audio, and find the nearest neighbours of a query vector quickly. They are the "
    "retrieval layer behind semantic search and RAG systems."
)

PROMPT_ENGINEERING_ANSWER = (
    "Prompt engineering is the practice of designing inputs that steer a language model toward "
    "useful output. Common techniques include clear instructions, few-shot examples, "
    "step-by-step reasoning and structured output formats."
)

MACHINE_LEARNING_ANSWER = (
    "Machine learning is a branch of AI where systems learn patterns from data instead of "
    "following hand-written rules. Supervised learning fits labelled examples, unsupervised "
    "learning finds structure in unlabelled data, and models are judged on data they have not "
    "seen during training."
)

FALLBACK_ANSWER = (
    "Great question! I've found some learning resources that should help you explore this topic. "
    "Check out the presentations and videos below, and feel free to ask me about RAG, neural "
    "networks, transformers, LLMs or machine learning for a deeper explanation."
)


def _contains_any(*keywords: str) -> Callable[[str], bool]:
    return lambda text: any(keyword in text for keyword in keywords)


# First match wins, so more specific topics come before broader ones
ANSWER_RULES: List[Tuple[Callable[[str], bool], str]] = [
    (_contains_any("rag"), RAG_ANSWER),
    (_contains_any("neural network", "deep learning"), NEURAL_NETWORK_ANSWER),
    (_contains_any("transformer", "attention"), TRANSFORMER_ANSWER),
    (_contains_any("llm", "large language model"), LLM_ANSWER),
    (_contains_any("vector database", "embedding"), VECTOR_DATABASE_ANSWER),
    (_contains_any("prompt"), PROMPT_ENGINEERING_ANSWER),
    (_contains_any("machine learning"), MACHINE_LEARNING_ANSWER),
]


def generate_mock_answer(query: str) -> str:
    """Canned explanation for the first topic mentioned in the query"""
    text = query.lower()
    for matches, answer in ANSWER_RULES:
        if matches(text):
            return answer
    return FALLBACK_ANSWER
