"""
Keyword classifier for bookmarks.

A bookmark's lower-cased URL and title run through an ordered table of
rules. The first rule with a matching alternative decides the category;
specific topics (AI, finance) come before broad ones (development, tools).
"""

from enum import Enum
from typing import Callable, List, NamedTuple, Tuple


class BookmarkCategory(Enum):
    # AI/ML
    AI_GENERAL = ("🤖 AI/ML General", "AI-ML/General")
    AI_LLMS = ("🧠 LLMs & Models", "AI-ML/LLMs & Models")
    AI_PROMPT_ENGINEERING = ("✍️  Prompt Engineering", "AI-ML/Prompt Engineering")
    AI_AGENTS = ("🤝 AI Agents", "AI-ML/Agents")
    AI_RAG = ("📚 RAG", "AI-ML/RAG")
    AI_CONTEXT = ("🔗 Context & Memory", "AI-ML/Context & Memory")
    AI_FINE_TUNING = ("🎯 Fine-Tuning", "AI-ML/Fine-Tuning")
    AI_EMBEDDINGS = ("📊 Embeddings", "AI-ML/Embeddings")
    AI_VECTOR_DB = ("🗄️  Vector Databases", "AI-ML/Vector Databases")
    AI_MLOPS = ("⚙️  MLOps", "AI-ML/MLOps")
    AI_COMPUTER_VISION = ("👁️  Computer Vision", "AI-ML/Computer Vision")
    AI_NLP = ("💬 NLP", "AI-ML/NLP")
    AI_RESEARCH = ("🔬 AI Research", "AI-ML/Research")
    # Development
    DEV_GENERAL = ("🛠️  Dev/General", "Development/General")
    DEV_REACT = ("⚛️  Dev/React", "Development/React")
    DEV_PYTHON = ("🐍 Dev/Python", "Development/Python")
    DEV_JAVA = ("☕ Dev/Java", "Development/Java")
    DEV_RUST = ("🦀 Dev/Rust", "Development/Rust")
    DEV_JAVASCRIPT = ("🟨 Dev/JavaScript", "Development/JavaScript")
    DEV_TYPESCRIPT = ("🔷 Dev/TypeScript", "Development/TypeScript")
    DEV_CSS = ("🎨 Dev/CSS", "Development/CSS")
    DEV_KUBERNETES = ("☸️  Dev/Kubernetes", "Development/Kubernetes")
    DEV_DOCKER = ("🐳 Dev/Docker", "Development/Docker")
    DEV_POSTGRES = ("🐘 Dev/PostgreSQL", "Development/PostgreSQL")
    DEV_DATABASE = ("🗃️  Dev/Database", "Development/Database")
    DEV_AWS = ("☁️  Dev/AWS", "Development/AWS")
    DEV_SERVERLESS = ("⚡ Dev/Serverless", "Development/Serverless")
    DEV_WEBTECH = ("🌐 Dev/WebTech", "Development/WebTech")
    DEV_MOBILE = ("📱 Dev/Mobile", "Development/Mobile")
    DEV_GIT = ("📦 Dev/Git", "Development/Git")
    DEV_DEVOPS = ("🔧 Dev/DevOps", "Development/DevOps")
    DEV_API = ("🔌 Dev/API", "Development/API")
    # Finance
    FINANCE_GENERAL = ("💰 Finance/General", "Finance/General")
    FINANCE_CRYPTO = ("₿ Finance/Crypto", "Finance/Crypto")
    FINANCE_TRADING = ("📈 Finance/Trading", "Finance/Trading")
    FINANCE_PERSONAL = ("💵 Finance/Personal", "Finance/Personal")
    PERSONAL_DEVELOPMENT = ("🌱 Personal Development", "Personal Development")
    # General
    SOCIAL = ("👥 Social", "Social Media")
    NEWS = ("📰 News", "News")
    SHOPPING = ("🛒 Shopping", "Shopping")
    ENTERTAINMENT = ("🎬 Entertainment", "Entertainment")
    EDUCATION = ("📚 Education", "Education")
    REFERENCE = ("📖 Reference", "Reference")
    TOOLS = ("🔧 Tools", "Tools & Utilities")
    HEALTH = ("🏥 Health", "Health")
    TRAVEL = ("✈️  Travel", "Travel")
    FOOD = ("🍕 Food", "Food & Recipes")
    SPORTS = ("⚽ Sports", "Sports")
    GAMING = ("🎮 Gaming", "Gaming")
    MUSIC = ("🎵 Music", "Music")
    VIDEO = ("📹 Video", "Video")
    OTHER = ("📁 Other", "Other")

    def __init__(self, label: str, folder_name: str):
        self.label = label
        self.folder_name = folder_name

    def __str__(self) -> str:
        return self.label


def extract_domain(url: str) -> str:
    """Host part of a URL, lower-cased and without a leading `www.`."""
    url_lower = url.lower()
    for scheme in ("https://", "http://", "file://"):
        if url_lower.startswith(scheme):
            url_lower = url_lower[len(scheme):]
            break
    domain = url_lower.split("/", 1)[0]
    if domain.startswith("www."):
        domain = domain[len("www."):]
    return domain


class Subject(NamedTuple):
    url: str
    title: str
    combined: str
    domain: str


Matcher = Callable[[Subject], bool]


def url(*needles: str) -> Matcher:
    return lambda s: any(n in s.url for n in needles)


def text(*needles: str) -> Matcher:
    """Match anywhere in `<url> <title>`."""
    return lambda s: any(n in s.combined for n in needles)


def title(*needles: str) -> Matcher:
    return lambda s: any(n in s.title for n in needles)


def domain(*names: str) -> Matcher:
    """Exact host or any subdomain of it."""
    return lambda s: any(s.domain == n or s.domain.endswith("." + n) for n in names)


def all_of(*matchers: Matcher) -> Matcher:
    return lambda s: all(m(s) for m in matchers)


def without(matcher: Matcher, *needles: str) -> Matcher:
    """matcher, unless any needle appears in `<url> <title>`."""
    return lambda s: matcher(s) and not any(n in s.combined for n in needles)


C = BookmarkCategory

RULES: List[Tuple[BookmarkCategory, List[Matcher]]] = [
    # AI/ML, most specific first
    (C.AI_RAG, [
        text("retrieval augmented", "rag ", " rag", "llamaindex", "llama-index",
             "llama_index", "document retrieval"),
        all_of(text("langchain"), text("retriev")),
        all_of(text("haystack"), text("ai")),
        all_of(text("semantic search"), text("llm")),
        all_of(text("knowledge base"), text("ai")),
        all_of(text("chunking"), text("llm", "embedding")),
    ]),
    (C.AI_CONTEXT, [
        text("context window", "context length", "long context", "conversation memory",
             "chat history", "mem0", "memgpt", "context management", "token limit",
             "context compression"),
        all_of(text("memory"), text("llm", "agent", "ai")),
        all_of(text("sliding window"), text("context")),
    ]),
    (C.AI_AGENTS, [
        text("ai agent", "autonomous agent", "langchain agent", "autogpt", "auto-gpt",
             "babyagi", "crewai", "crew ai", "autogen", "agent framework", "multi-agent",
             "multiagent", "agentic", "agent orchestration", "smolagent", "phidata",
             "model context protocol"),
        all_of(text("tool use"), text("llm")),
        all_of(text("function calling"), text("ai")),
        all_of(text("swarm"), text("agent")),
        all_of(url("mcp"), text("protocol", "context")),
    ]),
    (C.AI_PROMPT_ENGINEERING, [
        text("prompt engineering", "prompt template", "prompting", "chain of thought",
             "cot prompting", "few-shot", "zero-shot", "in-context learning",
             "prompt injection", "system prompt", "prompt optimization", "dspy",
             "promptfoo", "prompt testing"),
        all_of(text("jailbreak"), text("llm")),
    ]),
    (C.AI_VECTOR_DB, [
        url("pinecone.io", "weaviate.io", "milvus.io", "qdrant", "chromadb", "lancedb",
            "vespa.ai"),
        text("vector database", "vector db", "vectorstore", "vector store", "pgvector"),
        all_of(url("chroma"), text("vector")),
        all_of(text("faiss", "annoy", "similarity search"), text("vector")),
    ]),
    (C.AI_EMBEDDINGS, [
        text("embedding", "sentence transformer", "text-embedding", "ada-002",
             "openai embedding", "cohere embed", "word2vec", "doc2vec",
             "semantic similarity", "voyage ai", "jina embedding"),
        all_of(url("huggingface"), text("embed")),
    ]),
    (C.AI_FINE_TUNING, [
        text("fine-tun", "finetun", "lora", "qlora", "peft", "instruction tuning", "rlhf",
             "axolotl", "unsloth"),
        all_of(text("adapter"), text("llm")),
        all_of(text("dpo"), text("training")),
        all_of(text("sft"), text("llm", "training")),
        all_of(text("training data"), text("llm")),
        url("predibase"),
        all_of(url("together.ai"), text("fine")),
    ]),
    (C.AI_LLMS, [
        url("openai.com", "anthropic.com", "claude.ai", "gemini.google", "bard.google",
            "mistral.ai", "cohere.com", "huggingface.co", "ollama", "replicate.com",
            "together.ai", "groq.com", "anyscale.com", "perplexity.ai", "deepseek",
            "meta.ai"),
        all_of(text("llama"), text("model", "meta", "ai")),
        text("gpt-4", "gpt-3", "chatgpt", "mixtral", "qwen", "yi model", "command-r",
             "large language model", "foundation model"),
        all_of(text("claude"), text("anthropic")),
        all_of(text("gemini"), text("google")),
        all_of(text("mistral"), text("model")),
        all_of(text("phi-"), text("microsoft")),
        all_of(text("falcon"), text("model")),
    ]),
    (C.AI_MLOPS, [
        url("mlflow", "wandb.ai", "weights-and-biases", "neptune.ai", "comet.ml",
            "dagshub", "dvc.org", "kubeflow", "bentoml", "seldon", "ray.io", "modal.com"),
        text("mlops", "ml ops", "model deployment", "model serving", "model monitoring",
             "experiment tracking", "model registry", "feature store", "ml pipeline"),
    ]),
    (C.AI_COMPUTER_VISION, [
        text("computer vision", "image recognition", "object detection",
             "image segmentation", "opencv", "stable diffusion", "midjourney", "dall-e",
             "imagen", "diffusion model", "image generation", "text-to-image",
             "image-to-image", "inpainting", "controlnet", "comfyui", "vision model"),
        all_of(text("yolo"), text("detection")),
        url("civitai", "stability.ai", "runway"),
        all_of(text("multimodal"), text("vision")),
    ]),
    (C.AI_NLP, [
        text("natural language processing", "nlp ", " nlp", "text classification",
             "named entity", "ner ", "sentiment analysis", "text mining", "spacy", "nltk",
             "tokeniz", "part-of-speech", "dependency parsing", "text extraction",
             "information extraction"),
    ]),
    (C.AI_RESEARCH, [
        all_of(url("arxiv.org"), text("ai", "machine learning", "llm", "neural", "transformer")),
        url("paperswithcode.com", "connectedpapers.com", "deepmind.com", "ai.meta.com"),
        all_of(url("semanticscholar.org", "research.google", "research.microsoft.com"),
               text("ai")),
        all_of(text("research paper"), text("ai")),
        text("ai research", "ml research"),
    ]),
    (C.AI_GENERAL, [
        text("artificial intelligence", "machine learning", "deep learning",
             "neural network", "tensorflow", "pytorch", "keras", "scikit-learn", "sklearn",
             "ai tool", "ml tool", "generative ai", "gen ai", "langchain", "llamaindex"),
        all_of(text("transformer"), text("ai", "model")),
        url("kaggle.com", "fast.ai", "deeplearning.ai"),
        all_of(text("inference"), text("model", "ai")),
    ]),
    # Finance, before development
    (C.FINANCE_CRYPTO, [
        url("coinbase.com", "binance.com", "kraken.com", "gemini.com", "ftx.com",
            "kucoin.com", "huobi", "okx.com", "bybit.com", "bitstamp", "bitfinex", "bitmex",
            "coinmarketcap.com", "coingecko.com", "tradingview.com", "dextools.io",
            "etherscan.io", "bscscan.com", "polygonscan.com", "uniswap", "sushiswap",
            "pancakeswap", "metamask.io", "opensea.io", "rarible.com", "looksrare"),
        text("bitcoin", "btc ", "ethereum", "eth ", "crypto", "blockchain", "defi", "nft",
             "ico ", "token sale", "airdrop", "staking", "yield farming", "liquidity pool",
             "smart contract", "altcoin", "memecoin", "chart pattern", "candlestick",
             "trading signal", "solana", "cardano", "polkadot", "avalanche", "arbitrum",
             "optimism", "layer 2", "web3", "dapp", "decentralized"),
        all_of(text("wallet"), text("crypto", "bitcoin", "ethereum")),
        all_of(text("exchange"), text("crypto", "coin", "token")),
        all_of(text("technical analysis"), text("crypto", "coin")),
        without(text("polygon"), "css"),
    ]),
    (C.FINANCE_TRADING, [
        url("robinhood.com", "etrade.com", "tdameritrade.com", "thinkorswim",
            "interactivebrokers", "stockcharts.com", "finviz.com", "yahoo.com/finance",
            "finance.yahoo.com", "marketwatch.com", "seekingalpha.com", "investopedia.com",
            "morningstar.com"),
        text("stock market", "stock trading", "forex", "options trading", "futures trading",
             "dividend", "market analysis", "bull market", "bear market", "earnings report",
             "etf ", "index fund"),
        all_of(text("portfolio"), text("invest")),
    ]),
    (C.FINANCE_PERSONAL, [
        url("mint.com", "ynab.com", "personalcapital.com", "creditkarma.com",
            "nerdwallet.com", "bankrate.com"),
        text("budget", "saving money", "retirement", "401k", "ira ", "credit score",
             "mortgage", "debt", "tax return", "net worth", "financial planning",
             "emergency fund"),
        without(text("credit card"), "api"),
    ]),
    (C.FINANCE_GENERAL, [
        url("bank", "paypal.com", "venmo.com", "fidelity.com", "schwab.com", "vanguard.com",
            "finance."),
        without(text("invest"), "investigate"),
        text("financial"),
    ]),
    (C.PERSONAL_DEVELOPMENT, [
        text("habit", "self improvement", "self-improvement", "personal growth",
             "motivation", "mindset", "goal setting", "life hack", "morning routine",
             "meditation", "mindfulness", "journaling", "gratitude", "stoicism",
             "atomic habits", "deep work", "getting things done", "gtd ", "pomodoro",
             "procrastination", "discipline", "self help", "self-help", "memory technique",
             "speed reading", "learning how to learn", "career growth", "public speaking",
             "emotional intelligence"),
        without(text("productivity"), "developer", "tool"),
        without(text("time management"), "project"),
    ]),
    # General sites that would otherwise look like development
    (C.SHOPPING, [
        url("amazon.", "ebay.", "etsy.com", "aliexpress.com", "walmart.com", "target.com",
            "bestbuy.com", "newegg.com", "/cart", "/checkout"),
        text("buy now", "add to cart", "shopping", "discount code", "coupon"),
    ]),
    (C.VIDEO, [
        url("youtube.com", "youtu.be", "vimeo.com", "dailymotion.com", "twitch.tv"),
    ]),
    (C.SOCIAL, [
        url("facebook.com", "twitter.com", "instagram.com", "linkedin.com", "reddit.com",
            "discord.com", "slack.com", "telegram.org", "whatsapp.com", "snapchat.com",
            "tiktok.com", "pinterest.com", "tumblr.com", "mastodon", "threads.net",
            "bluesky"),
        domain("x.com"),
    ]),
    (C.NEWS, [
        url("news.", "bbc.com", "cnn.com", "nytimes.com", "washingtonpost.com",
            "theguardian.com", "reuters.com", "apnews.com", "bloomberg.com",
            "techcrunch.com", "theverge.com", "wired.com", "arstechnica.com", "engadget.com",
            "hackernews", "news.ycombinator.com"),
        text("breaking news"),
    ]),
    (C.EDUCATION, [
        url("coursera.org", "udemy.com", "edx.org", "khanacademy.org", "skillshare.com",
            "pluralsight.com", "lynda.com", "codecademy.com", "freecodecamp.org", ".edu",
            "learn."),
        text("online course", "free course"),
    ]),
    # Development
    (C.DEV_REACT, [
        url("reactjs.org", "react.dev", "reactnative.dev", "nextjs.org"),
        all_of(text("react"), text("component", "hook", "redux", "nextjs", "next.js",
                                   "gatsby", "jsx", "state management")),
        text("react native", "expo", "use effect", "usestate", "usememo", "zustand",
             "tanstack", "react query"),
    ]),
    (C.DEV_PYTHON, [
        url("python.org", "pypi.org", "django", "flask", "fastapi"),
        all_of(text("python"), text("pip", "django", "flask", "fastapi", "pandas", "numpy",
                                    "jupyter", "anaconda", "virtualenv", "poetry")),
        text("pydantic", "pytest"),
    ]),
    (C.DEV_RUST, [
        url("rust-lang.org", "crates.io"),
        all_of(text("rust"), text("cargo", "rustup", "tokio", "actix", "wasm", "serde")),
        text("rustacean"),
    ]),
    (C.DEV_JAVA, [
        all_of(text("java"), text("spring", "maven", "gradle", "jvm", "hibernate", "junit")),
        text("kotlin", "springboot", "spring boot"),
        url("spring.io"),
    ]),
    (C.DEV_TYPESCRIPT, [
        url("typescriptlang.org"),
        text("typescript", ".ts ", ".tsx"),
    ]),
    (C.DEV_JAVASCRIPT, [
        url("nodejs.org", "npmjs.com"),
        text("javascript", "node.js", "nodejs", "npm ", "yarn ", "pnpm", "deno", "bun ",
             "express.js", "expressjs", "es6", "ecmascript", "async await", "promise"),
    ]),
    (C.DEV_CSS, [
        text("css", "tailwind", "sass", "scss", "less ", "styled-component", "bootstrap",
             "material ui", "chakra ui", "flexbox", "grid layout", "animation",
             "responsive design"),
        url("csswizardry", "css-tricks"),
    ]),
    (C.DEV_KUBERNETES, [
        url("kubernetes.io"),
        text("kubernetes", "k8s", "kubectl", "helm ", "helm chart", "minikube",
             "kind cluster", "pod ", "service mesh", "istio", "ingress"),
        all_of(text("deployment"), text("container")),
    ]),
    (C.DEV_DOCKER, [
        url("docker.com", "hub.docker.com"),
        text("docker", "dockerfile", "docker-compose", "podman"),
        without(text("container"), "kubernetes"),
    ]),
    (C.DEV_POSTGRES, [
        url("postgresql.org"),
        text("postgresql", "postgres", "psql", "pg_"),
    ]),
    (C.DEV_DATABASE, [
        text("mysql", "mongodb", "redis", "elasticsearch", "sqlite", "dynamodb", "cassandra",
             "sql ", "nosql", "database", "query optimization", "orm ", "prisma", "drizzle"),
    ]),
    (C.DEV_AWS, [
        url("aws.amazon.com"),
        text("aws ", "amazon web services", "ec2", "s3 bucket", "cloudformation",
             "cloudwatch", "dynamodb", "sqs ", "sns "),
        all_of(text("lambda", "iam ", "cdk"), text("aws")),
    ]),
    (C.DEV_SERVERLESS, [
        text("serverless", "lambda function", "cloud function", "azure function",
             "netlify function", "edge function", "faas"),
        all_of(text("vercel"), text("function")),
        url("serverless.com"),
    ]),
    (C.DEV_GIT, [
        url("github.com", "gitlab.com", "bitbucket.org"),
        text("git ", "gitflow", "pull request", "merge conflict", "rebase", "cherry-pick"),
        all_of(text("branch", "commit"), text("git")),
    ]),
    (C.DEV_DEVOPS, [
        text("devops", "ci/cd", "cicd", "jenkins", "github actions", "gitlab ci", "circleci",
             "travis ci", "argo", "terraform", "ansible", "puppet", "chef ",
             "infrastructure as code", "monitoring", "prometheus", "grafana", "datadog",
             "sonarqube"),
    ]),
    (C.DEV_MOBILE, [
        text("ios ", "android ", "swift", "swiftui", "xcode", "flutter", "dart ",
             "mobile app", "app store", "play store"),
        url("developer.apple.com", "developer.android.com"),
    ]),
    (C.DEV_WEBTECH, [
        # every URL carries a scheme, so "http" only counts in the title
        title("http"),
        text("html", "dom ", "web component", "pwa", "progressive web", "service worker",
             "websocket", "cors", "oauth", "jwt ", "rest api", "graphql", "grpc", "webpack",
             "vite", "esbuild", "rollup", "babel", "vue ", "angular", "svelte"),
        url("vuejs.org", "angular.io", "svelte.dev"),
    ]),
    (C.DEV_API, [
        text("api ", "rest ", "openapi", "swagger", "postman", "insomnia", "endpoint",
             "webhook"),
    ]),
    (C.DEV_GENERAL, [
        url("stackoverflow.com", "stackexchange.com", "developer.", "docs.", "vercel.com",
            "netlify.com", "heroku.com", "cloud.google.com", "azure.microsoft.com",
            "codepen.io", "codesandbox.io", "replit.com", "jsfiddle.net", "dev.to",
            "hashnode.com"),
        all_of(url("medium.com"), text("programming")),
        text("documentation", "tutorial", "programming", "coding", "developer"),
    ]),
    # Remaining general categories
    (C.MUSIC, [
        url("spotify.com", "soundcloud.com", "music.apple.com", "bandcamp.com", "last.fm",
            "pandora.com", "deezer.com", "tidal.com"),
    ]),
    (C.GAMING, [
        url("steam", "epicgames.com", "gog.com", "playstation.com", "xbox.com",
            "nintendo.com", "ign.com", "gamespot.com", "kotaku.com", "polygon.com"),
    ]),
    (C.ENTERTAINMENT, [
        url("netflix.com", "hulu.com", "disneyplus.com", "hbomax.com", "primevideo.com",
            "crunchyroll.com", "imdb.com", "rottentomatoes.com", "letterboxd.com"),
    ]),
    (C.REFERENCE, [
        url("wikipedia.org", "wikimedia.org", "wiktionary.org", "britannica.com",
            "merriam-webster.com", "dictionary.com", "thesaurus.com", "translate.google",
            "deepl.com", "wolframalpha.com"),
    ]),
    (C.TOOLS, [
        url("notion.so", "trello.com", "asana.com", "monday.com", "figma.com", "canva.com",
            "drive.google.com", "dropbox.com", "box.com", "1password.com", "lastpass.com",
            "bitwarden.com", "grammarly.com", "calendly.com", "zoom.us", "meet.google.com",
            "teams.microsoft.com"),
        text("converter", "generator", "calculator"),
    ]),
    (C.HEALTH, [
        url("webmd.com", "mayoclinic.org", "healthline.com", "nih.gov", "cdc.gov", "who.int",
            "myfitnesspal.com", "strava.com", "fitbit.com"),
        text("health", "fitness", "workout", "diet"),
    ]),
    (C.TRAVEL, [
        url("booking.com", "airbnb.com", "expedia.com", "kayak.com", "tripadvisor.com",
            "skyscanner.com", "google.com/flights", "google.com/maps", "maps.google",
            "hotels.com", "vrbo.com"),
        text("travel", "flight", "hotel", "vacation"),
    ]),
    (C.FOOD, [
        url("allrecipes.com", "foodnetwork.com", "epicurious.com", "bonappetit.com",
            "seriouseats.com", "tasty.co", "doordash.com", "ubereats.com", "grubhub.com",
            "postmates.com", "yelp.com"),
        text("recipe", "cooking", "restaurant"),
    ]),
    (C.SPORTS, [
        url("espn.com", "sports.", "nfl.com", "nba.com", "mlb.com", "nhl.com", "fifa.com",
            "uefa.com", "olympics.com"),
        text("score", "league", "team"),
    ]),
]

del C


def categorize(url: str, title: str) -> BookmarkCategory:
    url_lower = url.lower()
    title_lower = title.lower()
    subject = Subject(
        url=url_lower,
        title=title_lower,
        combined=f"{url_lower} {title_lower}",
        domain=extract_domain(url),
    )
    for category, matchers in RULES:
        if any(match(subject) for match in matchers):
            return category
    return BookmarkCategory.OTHER
